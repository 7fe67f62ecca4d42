"""Unit tests for trust matching and selective script execution."""

import pytest

from conftest import FakeNpm, write_lockfile, write_trust_policy
from pkg_sec.config import ScannerConfig
from pkg_sec.exceptions import TrustPolicyError, NpmCommandError
from pkg_sec.models import TrustEntry
from pkg_sec.trust import TrustedScriptRunner, matches_entry, select_trusted


class TestMatching:
    """Test name and prefix matching against trust entries."""

    @pytest.mark.parametrize("package,entry,expected", [
        ("esbuild", "esbuild", True),
        ("esbuild/lib", "esbuild", True),
        ("@esbuild/linux-x64", "esbuild", False),
        ("@esbuild/linux-x64", "@esbuild", True),
        ("foo-bar", "foo", False),
        ("foo", "foo-bar", False),
        ("esbuild", "", False),
    ])
    def test_matches_entry(self, package, entry, expected):
        assert matches_entry(package, TrustEntry(name=entry)) is expected

    def test_select_keeps_installed_order(self):
        trusted = [TrustEntry(name="sharp"), TrustEntry(name="esbuild")]
        installed = ["esbuild", "lodash", "sharp", "sharp/node_modules/detect-libc"]

        assert select_trusted(installed, trusted) == ["esbuild", "sharp", "sharp/node_modules/detect-libc"]


def _project(tmp_path, installed, trusted):
    write_lockfile(tmp_path, {f"node_modules/{name}": "sha512-x" for name in installed})
    write_trust_policy(tmp_path, [{"name": n, "reason": "test"} for n in trusted])
    return tmp_path


class TestTrustedScriptRunner:
    """Test planning and executing rebuilds."""

    def test_only_trusted_packages_rebuilt(self, tmp_path):
        _project(tmp_path, ["esbuild", "@scope/esbuild", "lodash"], ["esbuild"])
        npm = FakeNpm()
        report = TrustedScriptRunner(tmp_path, npm).run()

        assert npm.rebuilt == ["esbuild"]
        assert report.success
        assert report.plan.installed == ["esbuild", "@scope/esbuild", "lodash"]

    def test_prefix_does_not_overmatch(self, tmp_path):
        _project(tmp_path, ["foo-bar"], ["foo"])
        npm = FakeNpm()
        report = TrustedScriptRunner(tmp_path, npm).run()

        assert npm.rebuilt == []
        assert report.success
        assert report.plan.to_rebuild == []

    def test_first_failure_stops_the_run(self, tmp_path):
        _project(tmp_path, ["esbuild", "sharp"], ["esbuild", "sharp"])
        npm = FakeNpm(rebuild_returncodes={"esbuild": 1})
        report = TrustedScriptRunner(tmp_path, npm).run()

        assert npm.rebuilt == ["esbuild"]
        assert not report.success
        assert report.failed.package == "esbuild"
        assert report.failed.returncode == 1
        assert report.skipped == ["sharp"]

    def test_timeout_fails(self, tmp_path):
        _project(tmp_path, ["esbuild"], ["esbuild"])
        npm = FakeNpm(rebuild_timeouts=["esbuild"])
        report = TrustedScriptRunner(tmp_path, npm).run(timeout=5)

        assert not report.success
        assert report.failed.timed_out
        assert npm.calls[-1] == ("rebuild", "esbuild", 5)

    def test_default_timeout_from_config(self, tmp_path):
        _project(tmp_path, ["esbuild"], ["esbuild"])
        npm = FakeNpm()
        TrustedScriptRunner(tmp_path, npm, ScannerConfig(rebuild_timeout_seconds=12)).run()

        assert npm.calls == [("rebuild", "esbuild", 12)]

    def test_npm_launch_error_fails(self, tmp_path):
        class MissingNpm(FakeNpm):
            def rebuild(self, package, timeout=None):
                raise NpmCommandError("Could not run npm")

        _project(tmp_path, ["esbuild"], ["esbuild"])
        report = TrustedScriptRunner(tmp_path, MissingNpm()).run()

        assert not report.success
        assert "Could not run npm" in report.failed.error

    def test_missing_policy_raises(self, tmp_path):
        write_lockfile(tmp_path, {"node_modules/esbuild": "sha512-x"})
        npm = FakeNpm()

        with pytest.raises(TrustPolicyError):
            TrustedScriptRunner(tmp_path, npm).run()
        assert npm.calls == []

    def test_missing_lockfile_warns(self, tmp_path):
        write_trust_policy(tmp_path, [{"name": "esbuild", "reason": "binary"}])
        npm = FakeNpm()
        plan = TrustedScriptRunner(tmp_path, npm).plan()

        assert plan.to_rebuild == []
        assert len(plan.findings) == 1
        assert "package-lock.json not found" in plan.findings[0].description

    def test_bun_lockfile_only_is_explained(self, tmp_path):
        write_trust_policy(tmp_path, [{"name": "esbuild", "reason": "binary"}])
        (tmp_path / "bun.lockb").write_bytes(b"\x00bun")
        plan = TrustedScriptRunner(tmp_path, FakeNpm()).plan()

        assert "Only bun.lockb found" in plan.findings[0].description

    def test_nameless_entry_is_ignored(self, tmp_path):
        write_lockfile(tmp_path, {"node_modules/esbuild": "sha512-x"})
        write_trust_policy(tmp_path, [{"reason": "forgot the name"}, {"name": "esbuild"}])
        npm = FakeNpm()
        runner = TrustedScriptRunner(tmp_path, npm)
        report = runner.run()

        assert npm.rebuilt == ["esbuild"]
        assert any("without a name" in f.title for f in report.plan.findings)

    def test_malformed_entries_do_not_block_valid_ones(self, tmp_path):
        write_lockfile(tmp_path, {
            "node_modules/esbuild": "sha512-a",
            "node_modules/sharp": "sha512-b",
            "node_modules/42": "sha512-c",
        })
        write_trust_policy(tmp_path, [
            "sharp",
            {"name": 42, "reason": "numeric"},
            {"name": "esbuild", "reason": "binary"},
        ])
        npm = FakeNpm()
        report = TrustedScriptRunner(tmp_path, npm).run()

        assert report.success
        assert npm.rebuilt == ["esbuild"]
        assert len([f for f in report.plan.findings if "without a name" in f.title]) == 2

    def test_callbacks(self, tmp_path):
        _project(tmp_path, ["esbuild", "sharp"], ["esbuild", "sharp"])
        started, finished = [], []
        TrustedScriptRunner(tmp_path, FakeNpm()).run(on_start=started.append, on_result=finished.append)

        assert started == ["esbuild", "sharp"]
        assert [r.package for r in finished] == ["esbuild", "sharp"]
        assert all(r.success for r in finished)
