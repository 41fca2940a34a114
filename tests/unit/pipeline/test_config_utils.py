import os

import pytest

from seqhand.pipeline import config_utils


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("sample_list: ~/samples.txt\n"
                    "out_dir: $SEQHAND_TEST_OUT/project\n"
                    "algorithm:\n"
                    "  quality_threshold: 30\n"
                    "resources:\n"
                    "  GATK:\n"
                    "    memory: 4g\n")
    return str(path)


def test_load_config_expands_paths(config_file, monkeypatch):
    monkeypatch.setenv("HOME", "/home/tester")
    monkeypatch.setenv("SEQHAND_TEST_OUT", "/scratch")
    config = config_utils.load_config(config_file)
    assert config["sample_list"] == "/home/tester/samples.txt"
    assert config["out_dir"] == "/scratch/project"
    assert config["algorithm"]["quality_threshold"] == 30
    assert config["config_file"] == config_file


def test_load_config_lowercases_resources(config_file):
    config = config_utils.load_config(config_file)
    assert config_utils.get_resources("gatk", config) == {"memory": "4g"}


def test_load_config_empty_file(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    config = config_utils.load_config(str(path))
    assert config["resources"] == {}
    assert config["algorithm"] == {}


def test_update_algorithm_skips_unset_values():
    config = {"algorithm": {"num_cores": 2}}
    assert config_utils.update_algorithm(config, num_cores=None) == config
    updated = config_utils.update_algorithm(config, num_cores=8)
    assert updated["algorithm"]["num_cores"] == 8
    assert config["algorithm"]["num_cores"] == 2


def test_get_program_from_resources(tmp_path):
    program = tmp_path / "seqqs"
    program.write_text("#!/bin/bash\n")
    os.chmod(str(program), 0o755)
    config = {"resources": {"seqqs": {"cmd": str(program)}}}
    assert config_utils.get_program("seqqs", config) == str(program)
    config = {"resources": {"seqqs": str(program)}}
    assert config_utils.get_program("seqqs", config) == str(program)


def test_get_program_searches_path(tmp_path, monkeypatch):
    program = tmp_path / "Rscript"
    program.write_text("#!/bin/bash\n")
    os.chmod(str(program), 0o755)
    monkeypatch.setenv("PATH", str(tmp_path))
    assert config_utils.get_program("rscript", {}, default="Rscript") == str(program)


def test_get_program_missing_raises(monkeypatch, tmp_path):
    monkeypatch.setenv("PATH", str(tmp_path))
    with pytest.raises(config_utils.CmdNotFound):
        config_utils.get_program("sickle", {"resources": {}})


def test_get_jar_explicit_and_from_dir(tmp_path):
    jar = tmp_path / "GenomeAnalysisTK.jar"
    jar.write_text("")
    assert config_utils.get_jar("gatk", {"resources": {"gatk": {"jar": str(jar)}}}) == str(jar)
    assert config_utils.get_jar("gatk", {"resources": {"gatk": {"dir": str(tmp_path)}}}) == str(jar)


def test_get_jar_missing_raises(tmp_path):
    with pytest.raises(ValueError):
        config_utils.get_jar("gatk", {"resources": {"gatk": {"dir": str(tmp_path)}}})
    with pytest.raises(ValueError):
        config_utils.get_jar("gatk", {"resources": {}})
