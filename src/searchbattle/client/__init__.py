"""Search Battle Python SDK — Client library for the Search Battle API.

Quick start::

    from searchbattle.client import SearchBattleClient

    client = SearchBattleClient("http://localhost:8080")
    for event in client.search("wombat"):
        print(event["source"], event.get("time"))
"""

from searchbattle.client.client import AsyncSearchBattleClient, SearchBattleClient

__all__ = ["AsyncSearchBattleClient", "SearchBattleClient"]
