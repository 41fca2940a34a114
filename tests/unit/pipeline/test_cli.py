import os
import runpy

import pytest

SCRIPT = os.path.join(os.path.dirname(__file__), os.pardir, os.pardir, os.pardir,
                      "scripts", "sequence_handling.py")


@pytest.fixture
def cli():
    return runpy.run_path(SCRIPT)


@pytest.mark.parametrize('key', ['PBS_ARRAYID', 'SLURM_ARRAY_TASK_ID'])
def test_non_integer_array_index_is_usage_error(cli, monkeypatch, capsys, key):
    monkeypatch.delenv('PBS_ARRAYID', raising=False)
    monkeypatch.delenv('SLURM_ARRAY_TASK_ID', raising=False)
    monkeypatch.setenv(key, 'abc')
    with pytest.raises(SystemExit) as excinfo:
        cli["parse_cl_args"](["Genotype_GVCFs", "config.yaml"])
    assert excinfo.value.code == 2
    assert "Array job index is not an integer" in capsys.readouterr().err


def test_array_index_from_environment(cli, monkeypatch):
    monkeypatch.delenv('SLURM_ARRAY_TASK_ID', raising=False)
    monkeypatch.setenv('PBS_ARRAYID', '4')
    args = cli["parse_cl_args"](["Genotype_GVCFs", "config.yaml"])
    assert args.shard_index == 4


def test_missing_array_index_is_usage_error(cli, monkeypatch):
    monkeypatch.delenv('PBS_ARRAYID', raising=False)
    monkeypatch.delenv('SLURM_ARRAY_TASK_ID', raising=False)
    with pytest.raises(SystemExit):
        cli["parse_cl_args"](["Genotype_GVCFs", "config.yaml"])


def test_explicit_shard_index_ignores_environment(cli, monkeypatch):
    monkeypatch.setenv('PBS_ARRAYID', 'abc')
    args = cli["parse_cl_args"](["Genotype_GVCFs", "config.yaml", "--shard-index", "2"])
    assert args.shard_index == 2
