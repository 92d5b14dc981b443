STATEMENT_URL = "/v1/statement"

QUERY_URL = "/v1/query/{query_id}"

NODES_URL = "/v1/node"
FAILED_NODES_URL = "/v1/node/failed"

CLUSTER_URL = "/v1/cluster"
