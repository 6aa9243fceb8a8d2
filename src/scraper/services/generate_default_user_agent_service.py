from pagescope.core.managers.config_manager import config_manager

DEFAULT_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"


def generate_default_user_agent() -> str:
    """
    Builds the fixed desktop Chrome user agent used for every request.
    Landing pages frequently serve stripped-down markup to unknown clients,
    so the loader always presents itself as a desktop browser.

    Returns:
        str: The constructed User-Agent string.
    """
    os_part = config_manager.get_nested("user_agent.platform", "Macintosh; Intel Mac OS X 10_15_7")
    chrome_version = config_manager.get_nested("user_agent.chrome_version", "120.0.0.0")

    return (
        f"Mozilla/5.0 ({os_part}) AppleWebKit/537.36 (KHTML, like Gecko) "
        f"Chrome/{chrome_version} Safari/537.36"
    )


def default_accept_header() -> str:
    return config_manager.get_nested("user_agent.accept", DEFAULT_ACCEPT)
