from welfaredesk.ui.dialogs.connection_dialog import ConnectionDialog
from welfaredesk.ui.dialogs.location_dialog import LocationDialog
from welfaredesk.ui.dialogs.stages_config_dialog import StagesConfigDialog
from welfaredesk.ui.dialogs.status_updates_dialog import StatusUpdateCard, StatusUpdatesDialog

__all__ = [
    "ConnectionDialog",
    "LocationDialog",
    "StagesConfigDialog",
    "StatusUpdateCard",
    "StatusUpdatesDialog",
]
