"""Start a long-running provisioning job."""

import logging


def handler(event, _ctx):
    logging.getLogger(__name__).info("starting job for %s", event)
    return {}
