from enum import Enum
from enum import unique


class StrEnum(str, Enum):
    pass


@unique
class CaptureBody(StrEnum):
    OFF = "off"
    ERRORS = "errors"
    TRANSACTIONS = "transactions"
    ALL = "all"


@unique
class LogLevel(StrEnum):
    TRACE = "trace"
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"
    OFF = "off"


@unique
class TransactionTypes(StrEnum):
    CUSTOM = "custom"
    REQUEST = "request"


@unique
class SpanTypes(StrEnum):
    DB = "db"
    EXTERNAL = "external"


# tags
TRANSACTION_TYPE = "transaction.type"
TRANSACTION_RESULT = "transaction.result"
SPAN_SUBTYPE = "span.subtype"
SPAN_ACTION = "span.action"
DB_SYSTEM = "db.system"

HTTP_METHOD = "http.method"
HTTP_URL = "http.url"
HTTP_STATUS_CODE = "http.status_code"
HTTP_REQUEST_HEADERS = "http.request.headers"
HTTP_REQUEST_BODY = "http.request.body"

USER_PREFIX = "usr"
CUSTOM_PREFIX = "custom"
