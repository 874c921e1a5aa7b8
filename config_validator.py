from logging_config import logger

DEFAULT_QUICKCHART_BASE_URL = "https://quickchart.io/chart"
DEFAULT_LLM_BASE_URL = "https://api.openai.com/v1"
DEFAULT_CHART_WIDTH = 600
DEFAULT_CHART_HEIGHT = 400
DEFAULT_MAX_ROWS = 50
DEFAULT_LLM_MAX_TOKENS = 2000
DEFAULT_LLM_TEMPERATURE = 0.7


def _validate_url(config_module, attr_name, default, display_name=None):
    """Validate a URL configuration attribute, resetting it to the default when invalid."""
    if display_name is None:
        display_name = attr_name.replace('_', ' ').title()

    value = getattr(config_module, attr_name, "")
    if not isinstance(value, str) or not value.startswith("http"):
        logger.warning(f"{display_name} ('{value}') appears to be invalid (should be a valid HTTP/HTTPS URL). Using default.")
        setattr(config_module, attr_name, default)
        return False
    return True


def _validate_positive_int(config_module, attr_name, default):
    """Validate a positive integer configuration attribute, resetting it to the default when invalid."""
    value = getattr(config_module, attr_name, default)

    try:
        parsed = int(value)
        if parsed <= 0:
            logger.warning(f"{attr_name} in config ('{value}') must be positive. Using default.")
            parsed = default
    except (ValueError, TypeError):
        logger.warning(f"Invalid {attr_name} in config ('{value}'), using default.")
        parsed = default

    setattr(config_module, attr_name, parsed)
    return parsed


def _validate_temperature(config_module):
    """Validate the sampling temperature, which OpenAI-compatible APIs accept between 0 and 2."""
    value = getattr(config_module, "llm_temperature", DEFAULT_LLM_TEMPERATURE)

    try:
        temperature = float(value)
        if not 0.0 <= temperature <= 2.0:
            logger.warning(f"llm_temperature in config ('{value}') must be between 0 and 2. Using default.")
            temperature = DEFAULT_LLM_TEMPERATURE
    except (ValueError, TypeError):
        logger.warning(f"Invalid llm_temperature in config ('{value}'), using default.")
        temperature = DEFAULT_LLM_TEMPERATURE

    config_module.llm_temperature = temperature


def _validate_fetch_timeout(config_module):
    """Validate the optional fetch timeout. None means no timeout."""
    value = getattr(config_module, "fetch_timeout_seconds", None)
    if value is None:
        return

    try:
        timeout = float(value)
        if timeout <= 0:
            logger.warning(f"fetch_timeout_seconds in config ('{value}') must be positive. Fetches will not time out.")
            timeout = None
    except (ValueError, TypeError):
        logger.warning(f"Invalid fetch_timeout_seconds in config ('{value}'). Fetches will not time out.")
        timeout = None

    config_module.fetch_timeout_seconds = timeout


def validate_config(config_module):
    """
    Validate the configuration module (config.py) and normalize it in place.

    Invalid optional values are logged and replaced by their defaults.

    Args:
        config_module: The imported config module

    Returns:
        bool: True if the configuration is valid
    """
    _validate_url(config_module, "quickchart_base_url", DEFAULT_QUICKCHART_BASE_URL, display_name="QuickChart base URL")
    _validate_positive_int(config_module, "chart_width", DEFAULT_CHART_WIDTH)
    _validate_positive_int(config_module, "chart_height", DEFAULT_CHART_HEIGHT)
    _validate_positive_int(config_module, "default_max_rows", DEFAULT_MAX_ROWS)
    _validate_fetch_timeout(config_module)

    _validate_url(config_module, "llm_base_url", DEFAULT_LLM_BASE_URL, display_name="LLM Base URL")
    _validate_positive_int(config_module, "llm_max_tokens", DEFAULT_LLM_MAX_TOKENS)
    _validate_temperature(config_module)

    if getattr(config_module, "llm_api_key", None):
        logger.info(f"Using LLM model: {config_module.llm_model} at {config_module.llm_base_url}")

    return True
