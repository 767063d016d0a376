from dataclasses import replace
from pathlib import Path

import pytest

from timeout_guard.analyzer import Analyzer, iter_source_files
from timeout_guard.models import AppConfig, ScanSettings
from timeout_guard.parsing import parse_source


MIXED_SOURCE = (
    "<?php\n"
    "$client->get('https://x');\n"
    "curl_exec($ch);\n"
    "$sf->request('GET', 'https://y');\n"
)


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def test_parse_source_reports_syntax_errors():
    assert parse_source("<?php\n$client->get('https://x');\n").ok

    broken = parse_source("<?php\n\n$client->get('https://x'\n")
    assert not broken.ok
    assert broken.tree is None
    assert "syntax error" in broken.error


def test_issues_are_stamped_with_their_file(tmp_path: Path):
    first = _write(tmp_path / "a.php", "<?php\n$client->get('https://x');\n")
    second = _write(tmp_path / "b.php", "<?php\ncurl_exec($ch);\n")

    issues = Analyzer().analyze(tmp_path)

    assert [(issue.file, issue.library) for issue in issues] == [
        (str(first), "Guzzle"),
        (str(second), "cURL"),
    ]


def test_issue_order_follows_detector_registration_within_a_file(tmp_path: Path):
    _write(tmp_path / "mixed.php", MIXED_SOURCE)

    issues = Analyzer().analyze(tmp_path)

    assert [(issue.library, issue.line) for issue in issues] == [
        ("Symfony HttpClient", 4),
        ("cURL", 3),
        ("Guzzle", 2),
    ]


def test_request_on_client_variable_is_claimed_by_both_libraries(tmp_path: Path):
    _write(tmp_path / "both.php", "<?php\n$client->request('GET', $url);\n")

    issues = Analyzer().analyze(tmp_path)

    assert [issue.library for issue in issues] == ["Symfony HttpClient", "Guzzle"]


def test_named_verb_requests_go_to_symfony(tmp_path: Path):
    _write(
        tmp_path / "named.php",
        "<?php\n"
        "$this->httpClient->request(method: 'GET', url: $url);\n"
        "$httpClient->request(method: 'GET', url: $url);\n",
    )

    issues = Analyzer().analyze(tmp_path)

    assert [(issue.library, issue.line) for issue in issues] == [
        ("Symfony HttpClient", 2),
        ("Symfony HttpClient", 3),
    ]


def test_parse_failure_is_skipped_and_later_files_are_analyzed(tmp_path: Path):
    broken = _write(tmp_path / "a_broken.php", "<?php\nfunction (\n")
    good = _write(tmp_path / "b_good.php", "<?php\n$client->post('https://x');\n")

    report = Analyzer().run(tmp_path)

    assert report.files_scanned == 2
    assert [issue.file for issue in report.issues] == [str(good)]
    assert [item.file for item in report.skipped] == [str(broken)]
    assert "syntax error" in report.skipped[0].reason


def test_undecodable_and_oversized_files_are_skipped(tmp_path: Path):
    (tmp_path / "latin1.php").write_bytes(b"<?php\n$x = '\xe9t\xe9';\n")
    _write(tmp_path / "big.php", "<?php\n" + "$a = 1;\n" * 50)

    config = AppConfig(scan=ScanSettings(max_file_size_bytes=100))
    report = Analyzer(config).run(tmp_path)

    reasons = {Path(item.file).name: item.reason for item in report.skipped}
    assert "UTF-8" in reasons["latin1.php"]
    assert "larger than 100 bytes" in reasons["big.php"]
    assert report.issues == ()


def test_iter_source_files_skips_hidden_excluded_and_other_extensions(tmp_path: Path):
    keep = _write(tmp_path / "src" / "Service.php", "<?php\n")
    _write(tmp_path / ".cache" / "Hidden.php", "<?php\n")
    _write(tmp_path / "src" / ".Dotfile.php", "<?php\n")
    _write(tmp_path / "vendor" / "guzzle" / "Client.php", "<?php\n")
    _write(tmp_path / "README.md", "docs\n")
    upper = _write(tmp_path / "Legacy.PHP", "<?php\n")

    found = list(iter_source_files(tmp_path, exclude_dirs=("vendor",)))

    assert found == [upper, keep]


def test_single_file_root_is_analyzed(tmp_path: Path):
    target = _write(tmp_path / "one.php", "<?php\n$api->delete('https://x');\n")

    issues = Analyzer().analyze(target)

    assert [(issue.file, issue.method) for issue in issues] == [(str(target), "delete")]


def test_missing_root_raises(tmp_path: Path):
    with pytest.raises(ValueError):
        Analyzer().analyze(tmp_path / "nope")


def test_repeated_runs_do_not_leak_findings(tmp_path: Path):
    _write(tmp_path / "a.php", MIXED_SOURCE)
    analyzer = Analyzer()

    first = analyzer.analyze(tmp_path)
    second = analyzer.analyze(tmp_path)

    assert first == second
    assert all(detector.issues() == [] for detector in analyzer.detectors)


def test_parallel_run_matches_sequential_order(tmp_path: Path):
    for index in range(12):
        body = MIXED_SOURCE if index % 3 else "<?php\n$client->get($u, ['timeout' => 2]);\n"
        _write(tmp_path / f"dir{index % 4}" / f"file{index:02d}.php", body)
    _write(tmp_path / "dir0" / "zz_broken.php", "<?php\nclass {\n")

    sequential = Analyzer().run(tmp_path)
    config = AppConfig(scan=replace(ScanSettings(), jobs=4))
    parallel = Analyzer(config).run(tmp_path)

    assert parallel.issues == sequential.issues
    assert parallel.skipped == sequential.skipped
    assert len(sequential.issues) == 8 * 3
