"""Media-server deep links (open an item in the server's web UI)."""

from __future__ import annotations

from availarr.domain.entities.endpoints import ServerType


def build_server_item_url(
    server_type: ServerType,
    server_url: str,
    item_id: str,
    server_id: str | None = None,
) -> str:
    """Build the web-UI URL for an item.

    Jellyfin: ``<base>/web/#/details?id=<id>[&serverId=<sid>]``
    Emby:     ``<base>/web/index.html#!/item?id=<id>[&serverId=<sid>]``
    """
    base = server_url.rstrip("/")
    server_id_param = f"&serverId={server_id}" if server_id else ""
    if server_type == "jellyfin":
        return f"{base}/web/#/details?id={item_id}{server_id_param}"
    return f"{base}/web/index.html#!/item?id={item_id}{server_id_param}"
