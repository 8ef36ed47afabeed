class ForwardError(Exception):
    """Delivery of one event (or batch) to the SIEM failed."""
