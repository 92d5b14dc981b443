from typing import Optional


def prune_dict(d: dict) -> dict:
    """Prune items from dictionaries where value is None.

    Args:
        d (dict): Dict to prune

    Returns:
        dict: Pruned dict
    """
    return {k: v for k, v in d.items() if v is not None}


def build_base_url(host: str, port: Optional[int], ssl: bool = False) -> str:
    """Build coordinator base URL from host and port.

    Host may already contain a schema, in which case it's respected.

    Args:
        host (str): Coordinator host name, optionally with schema
        port (Optional[int]): Coordinator port
        ssl (bool): Use https if no schema is provided

    Returns:
        str: Base URL without trailing slash
    """
    host = host.rstrip("/")
    if not host.startswith("http"):
        host = f"{'https' if ssl else 'http'}://{host}"
    # explicit port in host takes precedence
    if port and ":" not in host.split("://", 1)[1]:
        return f"{host}:{port}"
    return host
