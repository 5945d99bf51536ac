"""CSS class names used by the action list markup."""

from advanced_actions.core.items import ActionKind

LIST_CLASS = "flexify simplify-ul ts-advanced-list"
EMPTY_LIST_CLASS = "voxel-fse-empty"
ITEM_CLASS = "flexify ts-action"
ITEM_ID_PREFIX = "vxfse-repeater-item-"
ACTION_CLASS = "ts-action-con"
ICON_CLASS = "ts-action-icon"
INITIAL_CLASS = "ts-initial"
REVEAL_CLASS = "ts-reveal"
WRAP_CLASS = "ts-action-wrap"
POPUP_PANEL_CLASS = "ts-field-popup-container"
POPUP_HIDDEN_CLASS = "hidden"
ADD_CART_CLASS = "ts-add-cart"

# Marker class on the interactive element, per kind
KIND_CLASSES = {
    ActionKind.FOLLOW_POST: "ts-action-follow",
    ActionKind.FOLLOW_AUTHOR: "ts-action-follow",
    ActionKind.SHOW_ON_MAP: "ts-action-show-on-map",
    ActionKind.SELECT_ADDITION: "ts-use-addition",
}

# Extra class on the list row for popup-triggering kinds
WRAPPER_CLASSES = {
    ActionKind.EDIT_POST: "ts-popup-component",
    ActionKind.SHARE_POST: "ts-share-post",
}

ICON_PACK_PREFIXES = ("la", "las", "lab", "lar", "fa", "fas", "far", "fab")

EMPTY_PREVIEW_TEXT = 'Click "+ Add Item" in the sidebar to add actions'
EMPTY_LIVE_TEXT = "No actions configured"
