import logging
import sys

from tqdm import tqdm

from pagescope.core.managers.config_manager import config_manager


class LogWithTqdm(logging.Handler):
    """
    A logging handler that redirects output to `tqdm.write()`, so log
    messages do not interfere with the batch-analysis progress bar.
    """
    def emit(self, record):
        try:
            msg = self.format(record)
            tqdm.write(msg, file=sys.stderr)
            self.flush()
        except Exception:
            self.handleError(record)


def _to_level(level, fallback):
    if isinstance(level, str):
        return getattr(logging, level.upper(), fallback)
    return level


def configure_logger(general_level='INFO', module_specific_levels=None, silenced_loggers=None):
    """
    Configures the root logger and specific module loggers with a
    TQDM-friendly handler.
    """
    tqdm_aware_handler = LogWithTqdm()
    formatter = logging.Formatter(
        "%(asctime)s - %(levelname)s - [%(name)s:%(lineno)d] - %(message)s"
    )
    tqdm_aware_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(_to_level(general_level, logging.INFO))

    # Replace whatever was installed before with the single tqdm-aware handler.
    root_logger.handlers.clear()
    root_logger.addHandler(tqdm_aware_handler)

    if module_specific_levels:
        for name, level in module_specific_levels.items():
            logging.getLogger(name).setLevel(_to_level(level, logging.INFO))

    # Muzzle noisy loggers by setting their level high.
    if silenced_loggers:
        for name, level in silenced_loggers.items():
            logging.getLogger(name).setLevel(_to_level(level, logging.CRITICAL))


def configure_from_settings():
    """Applies the 'logging' section of settings.json."""
    configure_logger(
        general_level=config_manager.get_nested("logging.level", "INFO"),
        module_specific_levels=config_manager.get_nested("logging.module_levels", {}),
        silenced_loggers=config_manager.get_nested("logging.silenced", {}),
    )
