import pytest

from alex_cli.common.errors import ConfigValidationError
from alex_cli.runner.cli import build_parser
from alex_cli.runner.inputs import build_options, collect_files, parse_credentials
from conftest import write_json


@pytest.fixture(autouse=True)
def _no_env_fallbacks(monkeypatch):
    for name in ("ALEX_URI", "ALEX_TARGETS", "ALEX_USER"):
        monkeypatch.delenv(name, raising=False)


def _options(*argv):
    return build_options(build_parser().parse_args(list(argv)))


def _base(files, action="test"):
    return [
        "--uri", "http://alex.test/", "--targets", "http://a, http://b",
        "-a", action, "-u", "me@example.org:pw", "-c", files["config"], "-s", files["symbols"],
    ]


def test_parse_credentials_keeps_colons_in_password():
    creds = parse_credentials("me@example.org:pa:ss")
    assert creds.email == "me@example.org"
    assert creds.password == "pa:ss"


@pytest.mark.parametrize("value", ["me@example.org", ":pw", "me@example.org:", "  :  "])
def test_parse_credentials_rejects_incomplete_values(value):
    with pytest.raises(ConfigValidationError):
        parse_credentials(value)


def test_valid_test_options(input_files):
    opts = _options(*_base(input_files), "-t", input_files["tests"], "--clean-up")

    assert opts.base_url == "http://alex.test/rest"
    assert opts.targets == ("http://a", "http://b")
    assert opts.symbols[0]["name"] == "click"
    assert opts.symbol_groups == ()
    assert opts.tests[0]["name"] == "login works"
    assert opts.clean_up is True
    assert opts.suite_layout == "nested"


def test_target_alias(input_files):
    argv = _base(input_files)
    argv[argv.index("--targets")] = "--target"
    assert _options(*argv, "-t", input_files["tests"]).targets == ("http://a", "http://b")


def test_invalid_action_is_reported_first(input_files):
    with pytest.raises(ConfigValidationError, match="invalid action"):
        _options("-a", "deploy")


def test_missing_uri(input_files):
    with pytest.raises(ConfigValidationError, match="URI"):
        _options("-a", "learn")


def test_env_fallbacks(input_files, monkeypatch):
    monkeypatch.setenv("ALEX_URI", "http://env.test")
    monkeypatch.setenv("ALEX_TARGETS", "http://sut")
    monkeypatch.setenv("ALEX_USER", "env@example.org:pw")

    opts = _options("-a", "learn", "-c", input_files["learner"], "-s", input_files["symbols"])

    assert opts.base_url == "http://env.test/rest"
    assert opts.credentials.email == "env@example.org"


def test_learn_with_tests_is_rejected(input_files):
    with pytest.raises(ConfigValidationError, match="learn"):
        _options(*_base(input_files, "learn"), "-t", input_files["tests"])


def test_test_action_requires_tests(input_files):
    with pytest.raises(ConfigValidationError, match="tests"):
        _options(*_base(input_files))


def test_missing_config_file(input_files, tmp_path):
    argv = _base(input_files)
    argv[argv.index("-c") + 1] = str(tmp_path / "nope.json")
    with pytest.raises(ConfigValidationError, match="cannot be found"):
        _options(*argv, "-t", input_files["tests"])


def test_malformed_json(input_files, tmp_path):
    broken = tmp_path / "broken.json"
    broken.write_text("{not json")
    argv = _base(input_files)
    argv[argv.index("-s") + 1] = str(broken)
    with pytest.raises(ConfigValidationError, match="not valid JSON"):
        _options(*argv, "-t", input_files["tests"])


@pytest.mark.parametrize("content", [
    {"type": "symbols", "symbols": []},
    {"type": "symbolGroups", "symbols": [{"name": "a"}]},
    {"type": "other"},
    [],
    {"type": "symbols", "symbols": [{"label": "unnamed"}]},
    {"type": "symbolGroups", "symbolGroups": [{"name": "g", "groups": [{"symbols": ["x"]}]}]},
])
def test_symbol_file_without_symbols(input_files, tmp_path, content):
    argv = _base(input_files)
    argv[argv.index("-s") + 1] = write_json(tmp_path / "s.json", content)
    with pytest.raises(ConfigValidationError, match="symbols"):
        _options(*argv, "-t", input_files["tests"])


def test_symbol_groups_file(input_files, tmp_path):
    argv = _base(input_files)
    argv[argv.index("-s") + 1] = write_json(tmp_path / "g.json", {
        "type": "symbolGroups", "symbolGroups": [{"name": "g", "symbols": [], "groups": []}],
    })
    opts = _options(*argv, "-t", input_files["tests"])
    assert opts.symbols == ()
    assert opts.symbol_groups[0]["name"] == "g"


def test_tests_need_a_type(input_files, tmp_path):
    tests = write_json(tmp_path / "t.json", {"tests": [{"name": "untyped"}]})
    with pytest.raises(ConfigValidationError, match="case"):
        _options(*_base(input_files), "-t", tests)


def test_non_positive_timeout(input_files):
    with pytest.raises(ConfigValidationError, match="timeout"):
        _options(*_base(input_files), "-t", input_files["tests"], "--timeout", "0")


def test_unknown_suite_layout(input_files):
    with pytest.raises(ConfigValidationError, match="layout"):
        _options(*_base(input_files), "-t", input_files["tests"], "--suite-layout", "tree")


def test_collect_files(tmp_path, capsys):
    single = tmp_path / "one.txt"
    single.write_text("1")
    folder = tmp_path / "dir"
    folder.mkdir()
    (folder / "b.csv").write_text("b")
    (folder / "a.csv").write_text("a")
    (folder / "nested").mkdir()

    assert collect_files(single) == (single,)
    assert collect_files(folder) == (folder / "a.csv", folder / "b.csv")
    assert collect_files(tmp_path / "missing") == ()
    assert "could not be found" in capsys.readouterr().out
