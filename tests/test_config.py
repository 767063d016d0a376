import json
from pathlib import Path

import pytest

from timeout_guard.analyzer import Analyzer
from timeout_guard.config import ConfigError, load_config
from timeout_guard.models import DEFAULT_CLIENT_VARIABLE_NAMES, AppConfig


def test_example_config_loads():
    root = Path(__file__).resolve().parents[1]
    config = load_config(root / "configs" / "timeout-guard.example.json")

    assert config.scan.extensions == (".php",)
    assert "vendor" in config.scan.exclude_dirs
    assert config.scan.jobs == 4
    assert "paymentClient" in config.detectors.client_variable_names
    assert config.detectors.symfony_class_marker == "HttpClient"


def test_no_config_means_defaults():
    config = load_config(None)

    assert config == AppConfig()
    assert config.detectors.client_variable_names == DEFAULT_CLIENT_VARIABLE_NAMES
    assert config.detectors.curl_exec_functions == ("curl_exec",)


def test_partial_config_keeps_other_defaults(tmp_path: Path):
    path = tmp_path / "guard.json"
    path.write_text(json.dumps({"scan": {"extensions": ["php", ".inc"]}}), encoding="utf-8")

    config = load_config(path)

    assert config.scan.extensions == (".php", ".inc")
    assert config.scan.jobs == 1
    assert config.detectors == AppConfig().detectors


def test_missing_config_file_raises(tmp_path: Path):
    with pytest.raises(ConfigError, match="not found"):
        load_config(tmp_path / "missing.json")


@pytest.mark.parametrize(
    "payload",
    [
        "[]",
        "{not json",
        json.dumps({"scan": []}),
        json.dumps({"scan": {"jobs": 0}}),
        json.dumps({"scan": {"exclude_dirs": "vendor"}}),
        json.dumps({"detectors": {"symfony_class_marker": ""}}),
        json.dumps({"scan": {"extensions": []}}),
        json.dumps({"detectors": {"client_variable_names": [None]}}),
        json.dumps({"detectors": {"curl_exec_functions": ["curl_exec", 1]}}),
    ],
)
def test_invalid_config_raises(tmp_path: Path, payload: str):
    path = tmp_path / "bad.json"
    path.write_text(payload, encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(path)


def test_explicit_empty_lists_replace_the_defaults(tmp_path: Path):
    config_path = tmp_path / "guard.json"
    config_path.write_text(
        json.dumps({"detectors": {"foreign_client_variable_names": [], "curl_exec_functions": []}}),
        encoding="utf-8",
    )
    source = tmp_path / "src" / "Api.php"
    source.parent.mkdir()
    source.write_text("<?php\n$httpClient->request('GET', $url);\ncurl_exec($ch);\n", encoding="utf-8")

    config = load_config(config_path)
    issues = Analyzer(config).analyze(tmp_path / "src")

    assert config.detectors.curl_exec_functions == ()
    assert config.detectors.foreign_client_variable_names == ()
    assert config.detectors.client_variable_names == DEFAULT_CLIENT_VARIABLE_NAMES
    assert [issue.library for issue in issues] == ["Symfony HttpClient", "Guzzle"]


def test_configured_names_reach_the_detectors(tmp_path: Path):
    config_path = tmp_path / "guard.json"
    config_path.write_text(
        json.dumps({"detectors": {"client_variable_names": ["billing"], "curl_exec_functions": ["curl_multi_exec"]}}),
        encoding="utf-8",
    )
    source = tmp_path / "src" / "Billing.php"
    source.parent.mkdir()
    source.write_text(
        "<?php\n$billing->post('https://x');\n$client->post('https://x');\ncurl_exec($ch);\ncurl_multi_exec($mh, $r);\n",
        encoding="utf-8",
    )

    issues = Analyzer(load_config(config_path)).analyze(tmp_path / "src")

    assert [(issue.library, issue.line) for issue in issues] == [("cURL", 5), ("Guzzle", 2)]
