"""Woovi API endpoint definitions."""

from woovi_mcp.core.types import HttpMethod, Operation

# Charges
CREATE_CHARGE = Operation("create_charge", HttpMethod.POST, "/api/openpix/v1/charge")
GET_CHARGE = Operation("get_charge", HttpMethod.GET, "/api/v1/charge/{id}")
LIST_CHARGES = Operation("list_charges", HttpMethod.GET, "/api/v1/charge/")

# Customers
CREATE_CUSTOMER = Operation("create_customer", HttpMethod.POST, "/api/v1/customer")
GET_CUSTOMER = Operation(
    "get_customer",
    HttpMethod.GET,
    "/api/v1/customer/{id}",
    cacheable=True,
    cache_key_template="customer:{key}",
)
FIND_CUSTOMER_BY_EMAIL = Operation(
    "find_customer_by_email",
    HttpMethod.GET,
    "/api/v1/customer/",
    cacheable=True,
    cache_key_template="customer:{key}",
)
LIST_CUSTOMERS = Operation("list_customers", HttpMethod.GET, "/api/v1/customer/")

# Transactions
LIST_TRANSACTIONS = Operation("list_transactions", HttpMethod.GET, "/api/v1/transaction/")
GET_TRANSACTION = Operation("get_transaction", HttpMethod.GET, "/api/v1/transaction/{id}")

# Account
GET_DEFAULT_BALANCE = Operation(
    "get_balance",
    HttpMethod.GET,
    "/api/v1/account/",
    cacheable=True,
    cache_key_template="balance:{key}",
)
GET_ACCOUNT_BALANCE = Operation(
    "get_account_balance",
    HttpMethod.GET,
    "/api/v1/account/{id}",
    cacheable=True,
    cache_key_template="balance:{key}",
)

# Refunds
CREATE_REFUND = Operation("create_refund", HttpMethod.POST, "/api/v1/charge/{id}/refund")
GET_REFUND = Operation("get_refund", HttpMethod.GET, "/api/v1/refund/{id}")

ALL_OPERATIONS = (
    CREATE_CHARGE,
    GET_CHARGE,
    LIST_CHARGES,
    CREATE_CUSTOMER,
    GET_CUSTOMER,
    FIND_CUSTOMER_BY_EMAIL,
    LIST_CUSTOMERS,
    LIST_TRANSACTIONS,
    GET_TRANSACTION,
    GET_DEFAULT_BALANCE,
    GET_ACCOUNT_BALANCE,
    CREATE_REFUND,
    GET_REFUND,
)
