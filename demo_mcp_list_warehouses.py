# demo_mcp_list_warehouses.py
# Version: v1
#
# Demo: call the list_warehouses task directly and print results.
#
# Usage:
#
#   export SNOWFLAKE_ACCOUNT=myorg-myaccount
#   export SNOWFLAKE_TOKEN=<key-pair JWT>
#   python demo_mcp_list_warehouses.py

import asyncio
from typing import Any, Dict, List

from snowflake_sql_mcp.credentials import credentials_from_env
from snowflake_sql_mcp.tools import tasks


async def main() -> None:
    creds = credentials_from_env()

    print(f"Calling MCP task: list_warehouses() for account {creds.account}")
    result: Dict[str, Any] = await tasks.list_warehouses(creds)

    warehouses: List[Dict[str, Any]] = result.get("items", [])
    print(f"Warehouses returned: {len(warehouses)}")

    if not warehouses:
        print("No warehouses returned.")
        return

    for w in warehouses:
        print(
            f"- {w.get('name')}  state={w.get('state')}  size={w.get('size')}  "
            f"running={w.get('running')}  queued={w.get('queued')}"
        )


if __name__ == "__main__":
    asyncio.run(main())
