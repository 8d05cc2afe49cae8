import io
import tarfile

import pytest

from devenv_installer.errors import ConfigError, StepFailed, ValidationError
from devenv_installer.lib.manifests import ToolManifest
from devenv_installer.lib.shellrc import start_marker
from devenv_installer.pipeline import Criticality, Step, run_pipeline
from devenv_installer.steps import (
    ALL_STEPS,
    BunStep,
    BuildToolsStep,
    FlatpakStep,
    GithubCliStep,
    GitToolsStep,
    LazygitStep,
    PythonToolsStep,
    RustStep,
    ShellConfigStep,
    SnapStep,
    SystemUpdateStep,
    build_registry,
)
from devenv_installer.steps import step_60_github_cli, step_70_lazygit, step_120_flatpak, step_130_snap

from .helpers import FakeRunner, failed_outcome, ok_outcome

SCRIPT = "#!/bin/sh\necho installing\n"


def test_registry_order_and_criticality(make_ctx):
    steps = build_registry(make_ctx())

    ids = [s.step_id for s in steps]
    assert ids == [s.step_id for s in ALL_STEPS]
    assert ids[0] == "10_system_update"
    assert ids[-1] == "150_shell_config"
    assert len(set(ids)) == len(ids)
    critical = {s.step_id for s in steps if s.criticality is Criticality.CRITICAL}
    assert critical == {"10_system_update", "20_build_tools", "50_git_tools", "80_python_tools"}
    assert all(s.summary for s in steps if s.step_id != "10_system_update")


def test_registry_actions_bound_to_context(make_ctx):
    package = FakeRunner("package")
    steps = build_registry(make_ctx(package=package))

    assert steps[0].action() == 0
    assert package.argvs == [["dnf", "-y", "upgrade", "--refresh"]]


def test_system_update_failure_raises_with_exit_code(make_ctx):
    ctx = make_ctx(package=FakeRunner("package", lambda argv: failed_outcome(7)))

    with pytest.raises(StepFailed) as exc:
        SystemUpdateStep().run(ctx)

    assert exc.value.exit_code == 7


def test_build_tools_installs_group_packages(make_ctx):
    package = FakeRunner("package")

    assert BuildToolsStep().run(make_ctx(package=package)) == 0

    argv = package.argvs[0]
    assert argv[:3] == ["dnf", "install", "-y"]
    assert {"gcc", "gcc-c++", "make", "cmake", "clang"} <= set(argv)


def test_git_tools_enables_lfs(make_ctx):
    package = FakeRunner("package")

    GitToolsStep().run(make_ctx(package=package))

    assert package.argvs[-1] == ["git", "lfs", "install", "--system"]


def test_github_cli_adds_repo_when_missing(make_ctx, mocker, tmp_path):
    mocker.patch.object(step_60_github_cli, "PATHS", mocker.Mock(gh_repo_file=str(tmp_path / "gh-cli.repo")))
    package = FakeRunner("package")

    GithubCliStep().run(make_ctx(package=package))

    assert package.argvs[0] == ["dnf", "install", "-y", "dnf5-plugins"]
    assert package.argvs[1][:3] == ["dnf", "config-manager", "addrepo"]
    assert package.argvs[2] == ["dnf", "install", "-y", "gh"]


def test_github_cli_skips_existing_repo(make_ctx, mocker, tmp_path):
    repo = tmp_path / "gh-cli.repo"
    repo.write_text("[gh-cli]\n")
    mocker.patch.object(step_60_github_cli, "PATHS", mocker.Mock(gh_repo_file=str(repo)))
    package = FakeRunner("package")

    GithubCliStep().run(make_ctx(package=package))

    assert not any("config-manager" in a for a in package.argvs)


def _tarball_bytes():
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w:gz") as tf:
        data = b"#!/bin/true\n"
        info = tarfile.TarInfo("lazygit")
        info.size = len(data)
        tf.addfile(info, io.BytesIO(data))
    return buf.getvalue()


def test_lazygit_downloads_and_installs(make_ctx, mocker, tmp_path):
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    mocker.patch.object(step_70_lazygit, "PATHS", mocker.Mock(local_bin=str(bin_dir)))
    mocker.patch.object(step_70_lazygit, "command_exists", return_value=False)
    mocker.patch.object(step_70_lazygit, "release_arch", return_value="x86_64")
    mocker.patch.object(step_70_lazygit, "latest_release_version", return_value="0.44.1")

    def fake_download(runner, url, dest):
        assert url.endswith("/v0.44.1/lazygit_0.44.1_Linux_x86_64.tar.gz")
        dest.write_bytes(_tarball_bytes())
        return dest

    mocker.patch.object(step_70_lazygit, "download", side_effect=fake_download)

    assert LazygitStep().run(make_ctx()) == 0

    installed = bin_dir / "lazygit"
    assert installed.read_bytes() == b"#!/bin/true\n"
    assert installed.stat().st_mode & 0o111


def test_lazygit_skipped_when_present(make_ctx, mocker):
    mocker.patch.object(step_70_lazygit, "command_exists", return_value=True)
    network = FakeRunner("network")

    assert LazygitStep().run(make_ctx(network=network)) == 0
    assert network.calls == []


def test_lazygit_bad_archive_is_validation_error(make_ctx, mocker, tmp_path):
    mocker.patch.object(step_70_lazygit, "command_exists", return_value=False)
    mocker.patch.object(step_70_lazygit, "release_arch", return_value="x86_64")
    mocker.patch.object(step_70_lazygit, "latest_release_version", return_value="0.44.1")
    mocker.patch.object(
        step_70_lazygit,
        "download",
        side_effect=lambda runner, url, dest: (dest.write_bytes(b"<html>"), dest)[1],
    )

    with pytest.raises(ValidationError):
        LazygitStep().run(make_ctx())


def test_python_tools_run_pipx_as_target_user(make_ctx):
    installer = FakeRunner("installer")

    PythonToolsStep().run(make_ctx(installer=installer))

    assert installer.argvs == [
        ["pipx", "install", "uv"],
        ["pipx", "install", "poetry"],
        ["pipx", "install", "ruff"],
        ["pipx", "ensurepath"],
    ]
    assert {c["user"] for c in installer.calls} == {"dev"}


def test_python_tools_as_root_run_without_sudo(make_ctx):
    installer = FakeRunner("installer")

    PythonToolsStep().run(make_ctx(username="root", installer=installer))

    assert {c["user"] for c in installer.calls} == {None}


def test_bun_installs_and_adds_path_block(make_ctx, home):
    network = FakeRunner("network", lambda argv: ok_outcome(SCRIPT))
    installer = FakeRunner("installer")

    assert BunStep().run(make_ctx(network=network, installer=installer)) == 0

    assert network.argvs[0][-1] == "https://bun.sh/install"
    assert installer.calls[0]["argv"] == ["bash", "-s"]
    assert installer.calls[0]["input_text"] == SCRIPT
    assert installer.calls[0]["user"] == "dev"
    assert start_marker("bun-path") in (home / ".bashrc").read_text()


def test_bun_rerun_skips_installer_and_block(make_ctx, home):
    (home / ".bun" / "bin").mkdir(parents=True)
    (home / ".bun" / "bin" / "bun").write_text("")
    ctx = make_ctx()
    BunStep().run(ctx)
    first = (home / ".bashrc").read_bytes()

    installer = FakeRunner("installer")
    BunStep().run(make_ctx(installer=installer))

    assert installer.calls == []
    assert (home / ".bashrc").read_bytes() == first


def test_bun_root_does_not_touch_bashrc(make_ctx, home):
    network = FakeRunner("network", lambda argv: ok_outcome(SCRIPT))

    assert BunStep().run(make_ctx(username="root", network=network)) == 0
    assert not (home / ".bashrc").exists()


def test_rust_runs_rustup_then_cargo(make_ctx, home):
    network = FakeRunner("network", lambda argv: ok_outcome(SCRIPT))
    installer = FakeRunner("installer")

    RustStep().run(make_ctx(network=network, installer=installer))

    assert installer.argvs[0][:3] == ["sh", "-s", "--"]
    assert "rust-analyzer" in installer.argvs[0]
    cargo = str(home / ".cargo" / "bin" / "cargo")
    assert installer.argvs[1:] == [
        [cargo, "install", "tree-sitter-cli"],
        [cargo, "install", "eza"],
        [cargo, "install", "zoxide"],
    ]


def test_rust_cargo_failure_propagates(make_ctx):
    network = FakeRunner("network", lambda argv: ok_outcome(SCRIPT))
    installer = FakeRunner("installer", lambda argv: failed_outcome(101) if "eza" in argv else ok_outcome())

    with pytest.raises(StepFailed) as exc:
        RustStep().run(make_ctx(network=network, installer=installer))

    assert exc.value.exit_code == 101


def test_flatpak_installs_missing_pieces(make_ctx, mocker):
    mocker.patch.object(step_120_flatpak, "command_exists", return_value=False)
    mocker.patch.object(step_120_flatpak, "flatpak_has_app", return_value=False)
    package = FakeRunner("package")

    FlatpakStep().run(make_ctx(package=package))

    assert package.argvs[0] == ["dnf", "install", "-y", "flatpak"]
    assert package.argvs[1][:3] == ["flatpak", "remote-add", "--if-not-exists"]
    assert package.argvs[2][-2:] == ["flathub", "md.obsidian.Obsidian"]


def test_flatpak_skips_installed_app(make_ctx, mocker):
    mocker.patch.object(step_120_flatpak, "command_exists", return_value=True)
    mocker.patch.object(step_120_flatpak, "flatpak_has_app", return_value=True)
    package = FakeRunner("package")

    FlatpakStep().run(make_ctx(package=package))

    assert len(package.argvs) == 1
    assert package.argvs[0][:2] == ["flatpak", "remote-add"]


def test_snap_enables_socket_and_links(make_ctx, mocker):
    mocker.patch.object(step_130_snap, "command_exists", return_value=False)
    link = mocker.patch.object(step_130_snap, "link_snap_dir")
    package = FakeRunner("package")

    SnapStep().run(make_ctx(package=package))

    assert package.argvs[0] == ["dnf", "install", "-y", "snapd"]
    assert package.argvs[1] == ["systemctl", "enable", "--now", "snapd.socket"]
    link.assert_called_once_with(dry_run=False)


def test_link_snap_dir(tmp_path):
    target = tmp_path / "var-lib-snapd-snap"
    target.mkdir()
    link = tmp_path / "snap"

    step_130_snap.link_snap_dir(str(link), str(target))
    step_130_snap.link_snap_dir(str(link), str(target))

    assert link.is_symlink()


def test_shell_config_adds_aliases_once(make_ctx, home):
    ctx = make_ctx()

    assert ShellConfigStep().run(ctx) == 0
    assert ShellConfigStep().run(ctx) == 0

    text = (home / ".bashrc").read_text()
    assert text.count(start_marker("dev-aliases")) == 1
    assert 'alias ls="eza"' in text
    assert 'eval "$(zoxide init bash)"' in text


def test_shell_config_root_only_prints(make_ctx, home, caplog):
    with caplog.at_level("INFO"):
        assert ShellConfigStep().run(make_ctx(username="root")) == 0

    assert not (home / ".bashrc").exists()
    assert any('alias vim="nvim"' in r.getMessage() for r in caplog.records)


def test_shell_config_hard_failure_fails_step(make_ctx, home):
    (home / ".bashrc").mkdir()

    assert ShellConfigStep().run(make_ctx()) == 1


def _lazygit_release(mocker, bin_dir):
    mocker.patch.object(step_70_lazygit, "PATHS", mocker.Mock(local_bin=str(bin_dir)))
    mocker.patch.object(step_70_lazygit, "command_exists", return_value=False)
    mocker.patch.object(step_70_lazygit, "release_arch", return_value="x86_64")
    mocker.patch.object(step_70_lazygit, "latest_release_version", return_value="0.44.1")
    mocker.patch.object(
        step_70_lazygit,
        "download",
        side_effect=lambda runner, url, dest: (dest.write_bytes(_tarball_bytes()), dest)[1],
    )


def test_lazygit_unwritable_bin_dir_is_step_failure(make_ctx, mocker, tmp_path):
    _lazygit_release(mocker, tmp_path / "missing-bin")

    with pytest.raises(StepFailed, match="Cannot install lazygit"):
        LazygitStep().run(make_ctx())


def test_lazygit_install_error_does_not_stop_later_steps(make_ctx, mocker, tmp_path):
    _lazygit_release(mocker, tmp_path / "missing-bin")
    ctx = make_ctx()
    calls = []
    steps = [
        Step("70_lazygit", "Lazygit", Criticality.OPTIONAL, lambda: LazygitStep().run(ctx)),
        Step("80_python_tools", "Python", Criticality.CRITICAL, lambda: calls.append("python") or 0),
    ]

    result = run_pipeline(steps)

    assert calls == ["python"]
    assert result.exit_code == 0
    assert [s.step_id for s in result.failed_optional] == ["70_lazygit"]


def test_empty_package_list_is_config_error(make_ctx):
    manifest = ToolManifest(raw={"groups": {"build_tools": {"summary": "Build", "packages": []}}})
    package = FakeRunner("package")

    with pytest.raises(ConfigError, match="build_tools"):
        BuildToolsStep().run(make_ctx(package=package, manifest=manifest))

    assert package.calls == []
