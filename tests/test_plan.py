from __future__ import annotations

import pytest

from dotstrap.lib.brew import Brew
from dotstrap.lib.manifests import load_packages_manifest
from dotstrap.plan import (
    Installer,
    Item,
    execute_plan,
    expand_home,
    parse_sections,
    plan_items,
)
from dotstrap.state_store import ensure_defaults, tracked


def test_item_from_dict_defaults():
    item = Item.from_dict({"name": "fzf"})
    assert item.kind == "brew"
    assert item.cask is False
    assert item.applies_to("Mac") and item.applies_to("Linux")


@pytest.mark.parametrize(
    "raw",
    [
        {"kind": "brew"},
        {"name": "x", "kind": "apt"},
        {"name": "tpm", "kind": "git", "url": "https://example.invalid/tpm"},
        {"name": "wezterm", "platforms": {"Mac": True}},
        {"name": "wezterm", "platforms": ["Windows"]},
        {"name": "wezterm", "platforms": "mac"},
    ],
)
def test_item_from_dict_rejects_bad_items(raw):
    with pytest.raises(ValueError):
        Item.from_dict(raw)


def test_scalar_platforms_value_is_one_platform():
    item = Item.from_dict({"name": "wezterm", "cask": True, "platforms": "Mac"})
    assert item.platforms == ("Mac",)
    assert item.applies_to("Mac")
    assert not item.applies_to("Linux")

    (section,) = parse_sections({"sections": [{"id": "wm", "platforms": "Mac", "items": [{"name": "aerospace"}]}]})
    assert section.platforms == ("Mac",)
    assert section.applies_to("Mac")


def test_section_with_unknown_platform_is_rejected():
    with pytest.raises(ValueError, match="unknown platform"):
        parse_sections({"sections": [{"id": "wm", "platforms": ["Darwin"], "items": []}]})


def test_bundled_manifest_platform_split():
    sections = {s.id: s for s in parse_sections(load_packages_manifest())}

    wm = sections["window_manager"]
    assert not wm.applies_to("Linux")
    assert [i.name for i in wm.items][:2] == ["aerospace", "sketchybar"]
    assert wm.items[0].install_name == "nikitabobko/tap/aerospace"
    assert wm.items[1].tap == "FelixKratz/formulae"

    core = {i.name: i for i in sections["core"].items}
    assert not core["wezterm"].applies_to("Linux")
    assert core["tpm"].kind == "git"
    assert core["tpm"].dest == "~/.tmux/plugins/tpm"

    names = [i.name for s in sections.values() for i in s.items]
    assert len(names) == len(set(names))
    assert "stow" in names and "fzf-git.sh" in names


def test_expand_home(home):
    assert expand_home("~/fzf-git.sh", home) == home / "fzf-git.sh"
    assert expand_home("~", home) == home
    assert str(expand_home("/opt/x", home)) == "/opt/x"


def test_plan_items_is_pure():
    items = [Item("fzf"), Item("bat"), Item("jq")]
    seen = []

    def probe(item):
        seen.append(item.name)
        return item.name == "bat"

    plan = plan_items(items, probe)
    assert [i.name for i in plan.to_install] == ["fzf", "jq"]
    assert [i.name for i in plan.already_present] == ["bat"]
    assert seen == ["fzf", "bat", "jq"]


def test_present_items_are_skipped_without_install(fake_host, home):
    fake_host.formulae.update({"fzf", "bat"})
    state = ensure_defaults({})
    installer = Installer(Brew("brew"), home=home)

    plan = plan_items([Item("fzf"), Item("bat")], installer.is_present)
    execute_plan(plan, installer, state)

    assert fake_host.installs() == []
    assert tracked(state) == ([], ["fzf", "bat"])


def test_absent_items_are_installed_once(fake_host, home):
    state = ensure_defaults({})
    installer = Installer(Brew("brew"), home=home)
    items = [
        Item("ripgrep"),
        Item("sketchybar", tap="FelixKratz/formulae"),
        Item("tpm", kind="git", url="https://github.com/tmux-plugins/tpm", dest="~/.tmux/plugins/tpm"),
        Item("app-font", kind="download", url="https://example.invalid/f.ttf", dest="~/Library/Fonts/f.ttf"),
    ]

    execute_plan(plan_items(items, installer.is_present), installer, state)

    assert fake_host.installs() == [["brew", "install", "ripgrep"], ["brew", "install", "sketchybar"]]
    assert ["brew", "tap", "FelixKratz/formulae"] in fake_host.calls
    assert (home / ".tmux/plugins/tpm").is_dir()
    assert (home / "Library/Fonts/f.ttf").is_file()
    assert tracked(state) == (["ripgrep", "sketchybar", "tpm", "app-font"], [])


def test_rerun_classifies_everything_as_skipped(fake_host, home):
    items = [
        Item("neovim"),
        Item("wezterm", cask=True),
        Item("fzf-git.sh", kind="git", url="https://github.com/junegunn/fzf-git.sh", dest="~/fzf-git.sh"),
    ]
    installer = Installer(Brew("brew"), home=home)

    first = ensure_defaults({})
    execute_plan(plan_items(items, installer.is_present), installer, first)
    calls_after_first = len(fake_host.installs())

    second = ensure_defaults({})
    execute_plan(plan_items(items, installer.is_present), installer, second)

    assert tracked(first) == (["neovim", "wezterm", "fzf-git.sh"], [])
    assert tracked(second) == ([], ["neovim", "wezterm", "fzf-git.sh"])
    assert len(fake_host.installs()) == calls_after_first


def test_failed_install_aborts(fake_host, home):
    from dotstrap.errors import CommandError
    from dotstrap.lib.command import CmdResult

    original = fake_host._dispatch

    def failing(argv, cwd):
        if argv[1:2] == ["install"] and argv[-1] == "bat":
            return CmdResult(argv=argv, returncode=1, stdout="", stderr="No available formula")
        return original(argv, cwd)

    fake_host._dispatch = failing
    state = ensure_defaults({})
    installer = Installer(Brew("brew"), home=home)

    with pytest.raises(CommandError):
        execute_plan(plan_items([Item("fd"), Item("bat"), Item("eza")], installer.is_present), installer, state)

    assert tracked(state) == (["fd"], [])
