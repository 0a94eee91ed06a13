from __future__ import annotations

import logging
from typing import Sequence

from ..lib.nbt import Tag, TagType, compound_tag, encode, list_tag, string_tag
from ..lib.staging import write_output
from ..manifest import ServerEntry
from ..pipeline import InstallCtx

logger = logging.getLogger(__name__)

SERVERS_FILE = "servers.dat"


def build_servers_tree(servers: Sequence[ServerEntry]) -> Tag:
    """Shape the server list the way the client stores it in servers.dat."""

    entries = [
        compound_tag(
            {
                "ip": string_tag(server.ip),
                "name": string_tag(server.name),
            }
        )
        for server in servers
    ]
    return compound_tag({"servers": list_tag(entries, TagType.COMPOUND)})


def encode_servers(servers: Sequence[ServerEntry]) -> bytes:
    return encode("servers", build_servers_tree(servers))


class WriteServersStep:
    step_id = "20_write_servers"

    def run(self, ctx: InstallCtx) -> None:
        servers = ctx.manifest.servers
        if not servers:
            return

        payload = encode_servers(servers)
        out = write_output(ctx.root / SERVERS_FILE, payload)
        ctx.record.written.append(out)
        logger.info("The server data has been written.")
