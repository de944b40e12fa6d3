import yaml


def translate_catalog_to_dict(catalog):
    newdict = dict.fromkeys(catalog)
    for key, option in zip(catalog, catalog.values()):
        newdict[key] = option.value
    return newdict

def typename(onetype):
    if isinstance(onetype, tuple): return [t.__name__ for t in onetype]
    else: return [onetype.__name__]

def read_config(config, catalog):
    """Validate a configuration against a catalog of options and store the values.

    Parameters:
        config  : dict, or str holding a YAML document (e.g. "qmax: 1.\\nseed: 4")
        catalog : dict of Option

    Returns:
        dict with the value of every option of the catalog, defaults filled in
    """
    if isinstance(config, str):
        config = yaml.safe_load(config)
        if config is None: config = {}
    if not isinstance(config, dict):
        raise Exception("Please provide the configuration as a dict or as a YAML mapping, not %s." % type(config).__name__)

    for option in catalog.values():
        if option.value is None: option.value = option.default

    for config_key, config_value in config.items():
        if config_key not in catalog:
            raise Exception("%s is not an available configuration option. Please check info() for help. " % config_key)
        catalog[config_key].check(config_key, config_value)

    return translate_catalog_to_dict(catalog)


class Option(object):
    """A class for handling configuration options with validation.

    Attributes:
        name (str): Name of the configuration option.
        type (type or tuple): Allowed type(s) for this option.
        list (list): List of allowed values if restricted, None otherwise.
        description (str): Description of the option.
        default (any): Default value for the option.
        value (any): Current value of the option.
        verbose (bool): Whether to print the values as they are checked.

    Methods:
        check(): Check if a provided value is valid for this option and store it.
        error(): Raise an appropriate error for an invalid configuration value.
    """

    def __init__(self, config_name, config_type, config_list=None, description='', default=None, verbose=False):

        self.verbose = verbose
        self.name = config_name
        self.type = config_type
        self.list = config_list
        self.description = description
        self.default = default
        self.value = None

    def check(self, config_key, config_value):
        is_config = False
        if self.verbose: print("\'%s\': \'%s\'" % (config_key, config_value))
        # bool is a subclass of int, do not let it pass for a number
        if isinstance(config_value, self.type) and not (isinstance(config_value, bool) and bool not in typename_tuple(self.type)):
            if self.list is None: is_config = True
            elif isinstance(config_value, (str, int, float)):
                if any(config_value == o for o in self.list): is_config = True
        if is_config:
            self.value = config_value
        else:
            self.error(config_value)
        return is_config

    def error(self, config_value):
        if self.list is None:
            raise Exception("Input error in '%s'; expecting: %s (but provided: %s). Check info() in any doubt." % (self.name, typename(self.type), type(config_value).__name__))
        else:
            raise Exception("Input error in '%s'; expecting one of: %s (but provided: %s). Check info() in any doubt." % (self.name, self.list, config_value))


def typename_tuple(onetype):
    if isinstance(onetype, tuple): return onetype
    else: return (onetype,)
