from ape import networks

LOCAL_NETWORK_NAME = "local"


def is_local_network() -> bool:
    """Returns True when connected to a development network (eg. ape's test provider)."""
    return networks.provider.network.name == LOCAL_NETWORK_NAME
