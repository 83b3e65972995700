"""Domain service base."""


class Service:
    """Marker for stateless domain services built by the container.

    They check credentials and drive the second-factor and account-link
    protocols.
    """
