"""Tests for ActionList render nodes and HTML generation."""

import pytest

from advanced_actions import ActionList
from advanced_actions.core.action_list import build_popup_panel, render_icon
from advanced_actions.core.descriptor import PopupKind, RenderContext
from advanced_actions.core.items import ActionItem, ActionListConfig, IconValue
from advanced_actions.core.post_context import EditStep, Permissions, PostContext
from advanced_actions.core.share import share_links


def _make_post(**overrides):
    defaults = dict(
        post_id=42,
        post_title="Lakeside cabin",
        post_link="https://example.com/cabin",
        is_editable=True,
        timeline_enabled=True,
        is_followed=True,
        author_id=7,
        permissions=Permissions(delete=True, publish=True),
        status="publish",
        nonces={"delete_post": "nonce_delete", "follow": "nonce_follow"},
        edit_steps=[
            EditStep("details", "Details", "https://example.com/edit?step=details"),
            EditStep("photos", "Photos", "https://example.com/edit?step=photos"),
        ],
    )
    defaults.update(overrides)
    return PostContext(**defaults)


def _make_list(items, context=RenderContext.LIVE, post=None, **kwargs):
    return ActionList(items, context, post, **kwargs)


def test_container_and_config_script():
    html = _make_list([{"id": "top", "actionType": "back_to_top"}]).to_html()
    assert 'class="aal-container"' in html
    assert '<ul class="flexify simplify-ul ts-advanced-list">' in html
    assert 'class="vxconfig"' in html
    assert '"actionType": "back_to_top"' in html
    assert 'class="vxfse-repeater-item-top flexify ts-action"' in html


def test_config_script_escapes_closing_tags():
    html = _make_list([{"id": "a", "text": "</script><b>"}]).to_html()
    config_part = html.split('class="vxconfig">', 1)[1].split("</script>", 1)[0]
    assert "<\\/script>" in config_part


def test_delete_link_carries_action_and_confirm():
    html = _make_list([{"id": "del", "actionType": "delete_post"}], post=_make_post()).to_html()
    assert "action=user.posts.delete_post" in html
    assert "_wpnonce=nonce_delete" in html
    assert 'data-confirm="Are you sure?"' in html
    assert " vx-action " in html


def test_follow_uses_toggle_tooltips_and_state():
    item = {
        "id": "f",
        "actionType": "action_follow_post",
        "text": "Follow",
        "activeText": "Following",
        "enableTooltip": True,
        "tooltipText": "Follow this",
        "activeEnableTooltip": True,
        "activeTooltipText": "Unfollow",
    }
    html = _make_list([item], post=_make_post()).to_html()
    assert 'class="ts-action-con ts-action-follow active"' in html
    assert 'tooltip-inactive="Follow this"' in html
    assert 'tooltip-active="Unfollow"' in html
    assert "data-tooltip=" not in html
    assert '<span class="ts-initial" style="display:none">' in html
    assert '<span class="ts-reveal">' in html


def test_share_renders_popup_panel():
    html = _make_list([{"id": "s", "actionType": "share_post"}], post=_make_post()).to_html()
    assert "ts-share-post" in html
    assert 'class="ts-action-wrap"' in html
    assert 'data-popup-kind="share"' in html
    assert "Share post" in html
    for label in ("Facebook", "Twitter", "Copy link"):
        assert label in html
    assert 'data-copy="https://example.com/cabin"' in html


def test_edit_with_steps_opens_popup():
    actions = _make_list([{"id": "e", "actionType": "edit_post"}], post=_make_post())
    html = actions.to_html()
    assert "ts-popup-component" in html
    assert 'href="#"' in html
    assert "Edit post" in html
    assert "https://example.com/edit?step=photos" in html


def test_edit_with_single_step_links_directly():
    post = _make_post(edit_steps=[EditStep("details", "Details", "https://example.com/edit")])
    actions = _make_list([{"id": "e", "actionType": "edit_post"}], post=post)
    (node,) = actions.nodes()
    assert node.descriptor.href == "https://example.com/edit"
    assert node.popup is None
    assert "ts-action-wrap" not in actions.to_html()


@pytest.mark.parametrize(
    "context,text",
    [
        (RenderContext.PREVIEW, "Click &quot;+ Add Item&quot; in the sidebar to add actions"),
        (RenderContext.LIVE, "No actions configured"),
    ],
)
def test_empty_state(context, text):
    html = _make_list([], context=context).to_html()
    assert "voxel-fse-empty" in html
    assert text in html


def test_nodes_skip_hidden_items():
    items = [
        {"id": "a", "actionType": "back_to_top"},
        {"id": "b", "actionType": "back_to_top", "rowVisibility": "hide"},
        {"id": "c", "actionType": "delete_post"},
    ]
    actions = _make_list(items)
    assert [d.visible for d in actions.descriptors()] == [True, False, False]
    assert [n.item.id for n in actions.nodes()] == ["a"]
    assert "vxfse-repeater-item-b" not in actions.to_html()


def test_preview_renders_every_item():
    items = [
        {"id": "a", "actionType": "back_to_top", "rowVisibility": "hide"},
        {"id": "c", "actionType": "delete_post"},
    ]
    actions = _make_list(items, context=RenderContext.PREVIEW)
    assert [n.item.id for n in actions.nodes()] == ["a", "c"]


def test_item_lookup():
    actions = _make_list([{"id": "a"}])
    assert actions.item("a").id == "a"
    with pytest.raises(KeyError):
        actions.item("missing")


def test_unknown_kind_renders_container():
    html = _make_list([{"id": "x", "actionType": "teleport"}]).to_html()
    assert 'role="button"' in html
    assert 'data-action-id="x"' in html


def test_custom_icon_color():
    item = {
        "id": "a",
        "actionType": "back_to_top",
        "customStyle": True,
        "customIconColor": "#ff0000",
    }
    html = _make_list([item]).to_html()
    assert "--ts-icon-color:#ff0000" in html


def test_render_icon_variants():
    assert render_icon(None) == ""
    assert render_icon(IconValue("la-solid", "")) == ""
    assert render_icon(IconValue("svg", "<svg></svg>")) == "<svg></svg>"
    assert render_icon(IconValue("svg", "https://cdn/x.svg")) == '<img src="https://cdn/x.svg" alt="">'
    assert render_icon(IconValue("las", "la-trash")) == '<i class="las la-trash" aria-hidden="true"></i>'
    assert (
        render_icon(IconValue("las", "las la-trash"))
        == '<i class="las la-trash" aria-hidden="true"></i>'
    )


def test_repr_html_matches_to_html():
    actions = _make_list([{"id": "a", "actionType": "go_back"}])
    assert actions._repr_html_() == actions.to_html()


def test_effects_script_lists_visible_items():
    html = _make_list([{"id": "a", "actionType": "back_to_top"}]).to_html()
    assert "aalEffects_" in html
    assert '"kind": "scroll_to_top"' in html


def test_accepts_config_object():
    config = ActionListConfig.from_items([ActionItem(id="a", kind="go_back")])
    actions = ActionList(config)
    assert actions.items == config.items


def test_build_popup_panel_for_share_without_link():
    actions = _make_list([{"id": "s", "actionType": "share_post"}], post=PostContext(post_id=1))
    descriptor = actions.descriptors()[0]
    panel = build_popup_panel(descriptor, actions.post_context)
    assert panel.kind is PopupKind.SHARE
    assert panel.entries == []
    assert share_links(None) == []


def test_activate_through_list(viewport, history):
    actions = _make_list(
        [{"id": "top", "actionType": "back_to_top"}, {"id": "s", "actionType": "share_post"}],
        post=_make_post(),
    )
    assert actions.activate("top", viewport=viewport) is True
    assert viewport.scrolled_to_top == [True]

    controller = actions.popup_controller("s", viewport)
    assert actions.popup_controller("s", viewport) is controller
    actions.activate("s", viewport=viewport)
    assert controller.is_open
    actions.close_popups()
    assert not controller.is_open
    assert viewport.listeners == []


def test_popup_controller_takes_new_elements(viewport, make_element):
    actions = _make_list([{"id": "s", "actionType": "share_post"}], post=_make_post())
    first_trigger = make_element(100, 50, 80, 30)
    controller = actions.popup_controller("s", viewport, trigger=first_trigger)
    assert controller.panel is None

    commits = []
    trigger = make_element(200, 50, 80, 30)
    panel = make_element(0, 0, 340, 100)
    again = actions.popup_controller("s", viewport, trigger, panel, on_change=commits.append)
    assert again is controller
    assert controller.trigger is trigger
    assert controller.panel is panel

    # Omitted arguments keep what the controller already holds
    actions.popup_controller("s", viewport)
    assert controller.trigger is trigger

    controller.open()
    viewport.run_frames()
    viewport.run_frames()
    assert len(commits) == 1
    assert commits[0].left == 200


def test_browser_script_waits_for_layout_before_positioning():
    html = _make_list([{"id": "s", "actionType": "share_post"}], post=_make_post()).to_html()
    assert "openPopup !== p || !p.settled" in html
    assert "p.settled = true;" in html
