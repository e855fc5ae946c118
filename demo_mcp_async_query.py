# demo_mcp_async_query.py
# Version: v1
#
# Demo: submit a statement asynchronously, poll its status, then page
# through every result partition.
#
# Usage:
#
#   export SNOWFLAKE_ACCOUNT=myorg-myaccount
#   export SNOWFLAKE_TOKEN=<key-pair JWT>
#   export SNOWFLAKE_WAREHOUSE=COMPUTE_WH
#   python demo_mcp_async_query.py "SELECT * FROM SNOWFLAKE_SAMPLE_DATA.TPCH_SF1.NATION"

import asyncio
import sys

from snowflake_sql_mcp.client import create_client
from snowflake_sql_mcp.credentials import credentials_from_env
from snowflake_sql_mcp.models import StatementRequest, StatementStatus

RUNNING = {
    StatementStatus.RUNNING,
    StatementStatus.QUEUED,
    StatementStatus.RESUMING_WAREHOUSE,
    StatementStatus.BLOCKED,
}


async def main() -> None:
    statement = sys.argv[1] if len(sys.argv) > 1 else "SELECT CURRENT_TIMESTAMP()"
    client = create_client(credentials_from_env())

    submitted = await client.execute_statement_async(StatementRequest(statement=statement))
    handle = submitted.statement_handle
    print(f"Submitted: handle={handle} status={submitted.status.value}")

    status = await client.get_statement_status(handle)
    while status.status in RUNNING:
        await asyncio.sleep(1)
        status = await client.get_statement_status(handle)
        print(f"  status={status.status.value}")

    if status.status != StatementStatus.SUCCESS:
        print(f"Statement did not succeed: {status.message}")
        return

    page = await client.get_statement_page(handle)
    total = len(page.items)
    while page.has_more:
        page = await client.get_statement_page(
            handle, page.next_partition, partition_count=page.partition_count
        )
        total += len(page.items)

    print(f"Fetched {total} rows")


if __name__ == "__main__":
    asyncio.run(main())
