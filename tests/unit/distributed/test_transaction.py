import os

import pytest

from seqhand.distributed import transaction
from seqhand.distributed.transaction import file_transaction, tx_tmpdir


class TestTxTmpdir(object):

    def test_uses_base_dir_and_removes_default_base(self, tmp_path):
        with tx_tmpdir({}, str(tmp_path)) as tmp_dir:
            assert os.path.dirname(tmp_dir) == str(tmp_path / transaction.DEFAULT_TMP)
            assert os.path.isdir(tmp_dir)
        assert not os.path.exists(tmp_dir)
        assert not os.path.exists(str(tmp_path / transaction.DEFAULT_TMP))

    def test_uses_configured_tmp_dir(self, tmp_path):
        config = {"resources": {"tmp": {"dir": str(tmp_path / "scratch")}}}
        with tx_tmpdir(config, str(tmp_path / "work")) as tmp_dir:
            assert os.path.dirname(tmp_dir) == str(tmp_path / "scratch")
        assert os.path.isdir(str(tmp_path / "scratch"))

    def test_keeps_shared_base_in_use(self, tmp_path):
        with tx_tmpdir({}, str(tmp_path)) as outer:
            with tx_tmpdir({}, str(tmp_path)):
                pass
            assert os.path.isdir(outer)

    def test_remove_false_keeps_directory(self, tmp_path):
        with tx_tmpdir({}, str(tmp_path), remove=False) as tmp_dir:
            pass
        assert os.path.isdir(tmp_dir)


class TestFileTransaction(object):

    def test_moves_outputs_on_success(self, tmp_path):
        out_file = str(tmp_path / "out" / "sample.txt")
        os.makedirs(os.path.dirname(out_file))
        with file_transaction({}, out_file) as tx_out_file:
            assert tx_out_file != out_file
            assert os.path.dirname(os.path.dirname(tx_out_file)) == \
                str(tmp_path / "out" / transaction.DEFAULT_TMP)
            with open(tx_out_file, "w") as out_handle:
                out_handle.write("done")
        with open(out_file) as in_handle:
            assert in_handle.read() == "done"
        assert not os.path.exists(out_file + ".seqhandtmp")

    def test_multiple_outputs_without_config(self, tmp_path):
        out_files = [str(tmp_path / "a.txt"), str(tmp_path / "b.txt")]
        with file_transaction(*out_files) as tx_files:
            assert len(tx_files) == 2
            for tx_file in tx_files:
                open(tx_file, "w").close()
        assert all(os.path.exists(x) for x in out_files)

    def test_no_output_on_failure(self, tmp_path):
        out_file = str(tmp_path / "sample.vcf")
        with pytest.raises(RuntimeError):
            with file_transaction({}, out_file) as tx_out_file:
                with open(tx_out_file, "w") as out_handle:
                    out_handle.write("partial")
                raise RuntimeError("failed")
        assert not os.path.exists(out_file)
        assert not os.path.exists(str(tmp_path / transaction.DEFAULT_TMP))

    def test_moves_vcf_index(self, tmp_path):
        out_file = str(tmp_path / "chr1.vcf")
        with file_transaction({}, out_file) as tx_out_file:
            open(tx_out_file, "w").close()
            open(tx_out_file + ".idx", "w").close()
        assert os.path.exists(out_file + ".idx")
