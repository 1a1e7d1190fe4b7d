from __future__ import annotations

import importlib.util
import json
from pathlib import Path

SCRIPT_PATH = Path(__file__).resolve().parents[1] / 'scripts' / 'import_transactions.py'


def _load_script():
    spec = importlib.util.spec_from_file_location('import_transactions_script', SCRIPT_PATH)
    module = importlib.util.module_from_spec(spec)
    assert spec.loader is not None
    spec.loader.exec_module(module)
    return module


def test_import_script_saves_transactions(tmp_path, capsys):
    script = _load_script()
    csv_path = tmp_path / 'statement.csv'
    csv_path.write_text(
        'Date,Description,Amount\n2024-01-05,Starbucks,-4.50\n2024-01-06,ACME PAYROLL,2500\n',
        encoding='utf-8',
    )
    data_dir = tmp_path / 'data'

    assert script.main(csv_path, data_dir=data_dir) == 0

    saved = json.loads((data_dir / 'transactions.json').read_text(encoding='utf-8'))
    assert [t['category'] for t in saved] == ['Dining', 'Salary']
    out = capsys.readouterr().out
    assert 'Saved 2 transactions.' in out
    assert 'balance $2,495.50' in out


def test_import_script_dry_run_writes_nothing(tmp_path):
    script = _load_script()
    csv_path = tmp_path / 'statement.csv'
    csv_path.write_text('Date,Description,Amount\n2024-01-05,Starbucks,-4.50\n', encoding='utf-8')
    data_dir = tmp_path / 'data'

    assert script.main(csv_path, data_dir=data_dir, dry_run=True) == 0
    assert not (data_dir / 'transactions.json').exists()


def test_import_script_rejects_unsupported_files(tmp_path, capsys):
    script = _load_script()
    bad = tmp_path / 'statement.pdf'
    bad.write_bytes(b'%PDF')
    assert script.main(bad, data_dir=tmp_path / 'data') == 1
    assert 'Import failed' in capsys.readouterr().err
