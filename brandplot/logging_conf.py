import logging, sys

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"


def configure_logging(level=None):
    root = logging.getLogger()
    root.setLevel((level or 'INFO').upper())

    # create_app may run more than once per process (tests, serverless reloads)
    if any(getattr(h, '_brandplot', False) for h in root.handlers):
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._brandplot = True
    root.addHandler(handler)
