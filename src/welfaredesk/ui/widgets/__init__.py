from welfaredesk.ui.widgets.stage_row import StageRowCard

__all__ = [
    "StageRowCard",
]
