"""Sample unit of work retried with jitter."""


def handler(event, _ctx):
    return {"processed": True, "input": event}
