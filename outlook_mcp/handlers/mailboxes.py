"""
Shared mailbox discovery.

Graph has no single call that lists the mailboxes a user may open, so several
sources are probed and whatever answers is reported. Each probe may fail
independently, depending on tenant configuration and granted scopes.
"""

from typing import Any, Dict, List

from outlook_mcp.graph.client import GraphClient
from outlook_mcp.graph.errors import RemoteError, TransportError
from outlook_mcp.handlers.common import tool_errors
from outlook_mcp.utils.logger import get_logger

logger = get_logger(__name__)


async def _primary_mailbox(client: GraphClient) -> List[Dict[str, Any]]:
    user = await client.call("GET", "me", params={"$select": "displayName,mail,userPrincipalName"})
    address = user.get("mail") or user.get("userPrincipalName")
    if not address:
        return []
    return [{"type": "primary", "name": user.get("displayName") or "Primary Mailbox", "email": address}]


async def _people_shared_mailboxes(client: GraphClient) -> List[Dict[str, Any]]:
    response = await client.call(
        "GET",
        "me/people",
        params={
            "$filter": "personType/subclass eq 'SharedMailbox'",
            "$select": "displayName,scoredEmailAddresses",
            "$top": 50,
        },
    )
    found = []
    for person in response.get("value") or []:
        addresses = person.get("scoredEmailAddresses") or []
        if addresses:
            found.append({"type": "shared", "name": person.get("displayName"), "email": addresses[0].get("address")})
    return found


async def _group_mailboxes(client: GraphClient) -> List[Dict[str, Any]]:
    response = await client.call(
        "GET",
        "me/memberOf",
        params={
            "$filter": "groupTypes/any(c:c eq 'Unified')",
            "$select": "displayName,mail,id",
            "$top": 50,
        },
    )
    return [
        {"type": "group", "name": group.get("displayName"), "email": group["mail"]}
        for group in response.get("value") or []
        if group.get("mail")
    ]


PROBES = (
    ("user profile", _primary_mailbox),
    ("people API", _people_shared_mailboxes),
    ("group membership", _group_mailboxes),
)

LABELS = {
    "primary": "Your primary mailbox",
    "shared": "Shared mailbox",
    "group": "Microsoft 365 Group mailbox",
}


@tool_errors("listing shared mailboxes")
async def list_shared_mailboxes(client: GraphClient) -> str:
    mailboxes: List[Dict[str, Any]] = []
    for source, probe in PROBES:
        try:
            mailboxes.extend(await probe(client))
        except (RemoteError, TransportError) as e:
            logger.warning(f"Shared mailbox lookup via {source} failed: {e}")

    if not mailboxes:
        return (
            "No mailboxes could be discovered. If you know the address of a shared mailbox, "
            "pass it as the 'mailbox' parameter of any email, calendar or category tool."
        )

    lines = [
        f"{index}. {mb['name']} <{mb['email']}> - {LABELS[mb['type']]}"
        for index, mb in enumerate(mailboxes, start=1)
    ]
    return (
        f"Found {len(mailboxes)} mailbox(es):\n\n" + "\n".join(lines) +
        "\n\nTo access a shared mailbox, pass its address as the 'mailbox' parameter."
    )
