import io
import unittest
import unittest.mock
from pathlib import Path

from packctl.cli.main import main, resolve_argv
from packctl.lib.facade import RegistrationReport
from packctl.lib.plugins.errors import GitCommandError, LocationError
from packctl.lib.plugins.submodules import SubmoduleStatus
from test_utils import FakeBackend, pack_env


class ResolveArgvTests(unittest.TestCase):
    def test_usage_cases(self) -> None:
        for argv in ([], [""], ["-h"], ["--help"], ["help"]):
            with self.subTest(argv=argv):
                self.assertIsNone(resolve_argv(argv, "start"))

    def test_keywords_pass_through(self) -> None:
        for argv in (["start", "a/b"], ["opt", "a/b"], ["add", "a/b"], ["update"], ["list"]):
            with self.subTest(argv=argv):
                self.assertEqual(resolve_argv(argv, "start"), argv)

    def test_default_mode_prepended(self) -> None:
        self.assertEqual(resolve_argv(["a/b", "c/d"], "start"), ["start", "a/b", "c/d"])
        self.assertEqual(
            resolve_argv(["--keep-going", "a/b"], "opt"), ["opt", "--keep-going", "a/b"]
        )


class _CliCase(unittest.TestCase):
    def setUp(self) -> None:
        env = pack_env()
        self.env = env.__enter__()
        self.addCleanup(env.__exit__, None, None, None)
        self.backend = FakeBackend(toplevel=self.env.repo)
        patcher = unittest.mock.patch(
            "packctl.lib.plugins.context.GitSubmodules", return_value=self.backend
        )
        self.git_cls = patcher.start()
        self.addCleanup(patcher.stop)

    def run_main(self, argv: list[str]) -> tuple[str, str, int]:
        out, err = io.StringIO(), io.StringIO()
        code = 0
        with (
            unittest.mock.patch("sys.stdout", out),
            unittest.mock.patch("sys.stderr", err),
        ):
            try:
                main(argv)
            except SystemExit as e:
                if isinstance(e.code, str):
                    err.write(e.code)
                    code = 1
                else:
                    code = e.code or 0
        return out.getvalue(), err.getvalue(), code


class CliUsageTests(_CliCase):
    def test_no_arguments_prints_usage_and_fails(self) -> None:
        out, err, code = self.run_main([])
        self.assertEqual(code, 1)
        self.assertIn("usage:", err)
        self.assertEqual(out, "")
        self.assertEqual(self.backend.calls, [])

    def test_help_flags_fail(self) -> None:
        for flag in ("-h", "--help", "help"):
            with self.subTest(flag=flag):
                _, err, code = self.run_main([flag])
                self.assertEqual(code, 1)
                self.assertIn("usage:", err)

    def test_help_after_command_goes_to_stderr(self) -> None:
        for argv in (["start", "-h"], ["add", "--help"], ["a/b", "-h"], ["list", "-h"]):
            with self.subTest(argv=argv):
                out, err, code = self.run_main(argv)
                self.assertEqual(code, 1)
                self.assertIn("usage:", err)
                self.assertEqual(out, "")
        self.assertEqual(self.backend.calls, [])

    def test_usage_does_not_read_default_mode(self) -> None:
        self.env.config_file.write_text("pack:\n  default_mode: later\n", encoding="utf-8")
        for argv in ([], ["--help"]):
            with self.subTest(argv=argv):
                _, err, code = self.run_main(argv)
                self.assertEqual(code, 1)
                self.assertIn("usage:", err)
                self.assertNotIn("default_mode", err)

    def test_add_without_repositories_fails(self) -> None:
        for argv in (["add"], ["start"], ["opt", "--keep-going"]):
            with self.subTest(argv=argv):
                _, err, code = self.run_main(argv)
                self.assertEqual(code, 1)
                self.assertIn("usage:", err)
        self.assertEqual(self.backend.calls, [])


class CliAddTests(_CliCase):
    def test_default_mode_is_start(self) -> None:
        out, _, code = self.run_main(
            ["-C", str(self.env.repo), "tpope/vim-fugitive", "junegunn/fzf"]
        )

        self.assertEqual(code, 0)
        self.assertEqual(
            [c[2] for c in self.backend.calls if c[0] == "add"],
            ["start/vim-fugitive", "start/fzf"],
        )
        self.assertEqual(self.backend.ops()[-2:], ["sync", "update"])
        self.assertIn("Added fzf", out)
        self.git_cls.assert_called_once_with(self.env.repo.resolve())

    def test_directory_inside_pack_repository(self) -> None:
        start = self.env.repo / "start"
        start.mkdir()
        _, _, code = self.run_main(["-C", str(start), "a/b"])

        self.assertEqual(code, 0)
        self.assertEqual(self.backend.calls[0][2], "start/b")
        self.assertEqual(self.git_cls.call_args_list[0][0][0], start.resolve())
        self.assertEqual(self.git_cls.call_args_list[-1][0][0], self.env.repo.resolve())

    def test_opt_mode(self) -> None:
        _, _, code = self.run_main(["opt", "-C", str(self.env.repo), "preservim/nerdtree"])
        self.assertEqual(code, 0)
        self.assertEqual(self.backend.calls[0][2], "opt/nerdtree")

    def test_add_subcommand_mode_flag(self) -> None:
        self.run_main(["add", "--opt", "-C", str(self.env.repo), "dense-analysis/ale"])
        self.assertEqual(self.backend.calls[0][2], "opt/ale")
        self.backend.calls.clear()
        self.run_main(["add", "-C", str(self.env.repo), "dense-analysis/ale"])
        self.assertEqual(self.backend.calls[0][2], "start/ale")

    def test_add_uses_configured_default_mode(self) -> None:
        self.env.config_file.write_text("pack:\n  default_mode: opt\n", encoding="utf-8")
        self.run_main(["-C", str(self.env.repo), "a/b"])
        self.assertEqual(self.backend.calls[0][2], "opt/b")

    def test_no_shallow_flag(self) -> None:
        self.run_main(["start", "--no-shallow", "-C", str(self.env.repo), "a/b"])
        self.assertFalse(self.backend.calls[0][3])

    def test_failure_aborts_with_exit_1(self) -> None:
        self.backend.fail_on = {"https://github.com/bad/one.git": "add"}
        _, err, code = self.run_main(["-C", str(self.env.repo), "bad/one", "good/two"])
        self.assertEqual(code, 1)
        self.assertIn("exit code 128", err)
        self.assertEqual(self.backend.ops(), ["add"])

    def test_keep_going_reports_failures(self) -> None:
        self.backend.fail_on = {"https://github.com/bad/one.git": "add"}
        out, err, code = self.run_main(
            ["--keep-going", "-C", str(self.env.repo), "bad/one", "good/two"]
        )
        self.assertEqual(code, 1)
        self.assertIn("Added two", out)
        self.assertIn("1 of 2 repositories could not be added: bad/one", err)
        self.assertEqual(self.backend.ops(), ["add", "add", "commit", "sync", "update"])

    def test_location_check_flag(self) -> None:
        elsewhere = str(self.env.base / "x")
        with unittest.mock.patch.dict("os.environ", {"PACKCTL_PACK_ROOT": elsewhere}):
            _, err, code = self.run_main(
                ["--check-location", "-C", str(self.env.repo), "a/b"]
            )
        self.assertEqual(code, 1)
        self.assertIn("directly under", err)
        self.assertEqual(self.backend.calls, [])

    def test_location_check_from_config_passes(self) -> None:
        self.env.config_file.write_text(
            f"pack:\n  root: {self.env.pack_root}\n  location_check: true\n", encoding="utf-8"
        )
        _, _, code = self.run_main(["-C", str(self.env.repo), "a/b"])
        self.assertEqual(code, 0)
        self.assertEqual(self.backend.ops(), ["add", "commit", "sync", "update"])


class CliUpdateListTests(_CliCase):
    def test_update(self) -> None:
        out, _, code = self.run_main(["update", "-C", str(self.env.repo)])
        self.assertEqual(code, 0)
        self.assertEqual(self.backend.ops(), ["sync", "update"])
        self.assertIn("Submodules up to date", out)

    def test_update_failure(self) -> None:
        self.backend.sync = unittest.mock.Mock(
            side_effect=GitCommandError(["git", "submodule", "sync"], 1)
        )
        _, err, code = self.run_main(["update", "-C", str(self.env.repo)])
        self.assertEqual(code, 1)
        self.assertIn("git submodule sync", err)

    def test_list(self) -> None:
        self.backend.entries = [
            SubmoduleStatus("fzf", "start/fzf", "1" * 40, "master", "ok"),
            SubmoduleStatus("ale", "opt/ale", "2" * 40, "-", "uninitialized"),
        ]
        out, _, code = self.run_main(["list", "-C", str(self.env.repo)])
        self.assertEqual(code, 0)
        lines = out.splitlines()
        self.assertEqual(len(lines), 2)
        self.assertEqual(lines[0].split(), ["fzf", "master", "1" * 40])
        self.assertIn("[uninitialized]", lines[1])

    def test_list_empty(self) -> None:
        out, _, _ = self.run_main(["list", "-C", str(self.env.repo)])
        self.assertIn("No plugins registered", out)


class CliErrorMappingTests(unittest.TestCase):
    @unittest.mock.patch("packctl.cli.main.plugins.dispatch")
    def test_pack_error_becomes_system_exit(self, mock_dispatch) -> None:
        mock_dispatch.side_effect = LocationError("Not inside a git working tree: /x")
        with pack_env(), unittest.mock.patch("sys.stderr", io.StringIO()):
            with self.assertRaises(SystemExit) as ctx:
                main(["update"])
        self.assertEqual(str(ctx.exception), "Not inside a git working tree: /x")

    @unittest.mock.patch("packctl.cli.commands.plugins.add_plugins")
    def test_report_without_failures_exits_cleanly(self, mock_add) -> None:
        mock_add.return_value = RegistrationReport()
        with (
            pack_env() as env,
            unittest.mock.patch("sys.stdout", io.StringIO()),
            unittest.mock.patch(
                "packctl.lib.plugins.context.GitSubmodules",
                return_value=FakeBackend(toplevel=None),
            ),
        ):
            main(["-C", str(env.repo), "a/b"])
        ctx, mode, refs = mock_add.call_args[0]
        self.assertEqual(mode, "start")
        self.assertEqual(refs, ["a/b"])
        self.assertEqual(ctx.root, Path(env.repo).resolve())
