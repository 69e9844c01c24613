"""Keys under which the engine keeps its own state in the KeyValueStore."""

from enum import Enum


class StorageKey(str, Enum):
    LAST_OPENED_PIN = "last-opened-pin"
    RECENT_APPS = "local-recent-apps"
    DELAYED_EXECUTIONS = "delayed-executions"
    PERSISTENT_VARIABLES = "persistent-vars"


# Header parameter on the script directive that redirects execution to a browser
SCRIPT_TARGET_PARAM = "target"
