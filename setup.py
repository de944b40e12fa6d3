from setuptools import setup

# Core runtime dependencies
core_deps = [
    'numpy>=1.19.0',
    'scipy>=1.5.0',
    'pyyaml>=5.0.0',
    'vegas>=5.0',
]

# Development dependencies
dev_deps = [
    'pytest>=6.0.0',
    'pytest-cov>=2.0.0',
    'black>=21.0.0',
    'isort>=5.0.0'
]

setup(
    name='fnfast',
    version='0.1.0',
    description='Diagrammatic SPT and EFT predictions for cosmological n-point correlators.',
    author="The fnfast developers",
    license='MIT',
    packages=['fnfast'],
    install_requires=core_deps,
    extras_require={
        'dev': dev_deps,
        'test': dev_deps,
    },
    package_dir={'fnfast': 'fnfast'},
    zip_safe=False,
    python_requires='>=3.8',
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Science/Research",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Environment :: Console",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],
)
