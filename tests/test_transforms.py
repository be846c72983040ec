import json
from decimal import Decimal

from fina.domain import GoalIcon
from fina.transforms import FRAME_COLUMNS, load_seed, transactions_frame


def write_seed(tmp_path, data):
    path = tmp_path / "seed.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


def test_load_seed_replays_transactions(tmp_path):
    path = write_seed(tmp_path, {
        "user_name": "Ana",
        "monthly_income": "3000",
        "current_balance": "100.50",
        "goals": [
            {"id": "emergency", "icon": "emergency", "current_amount": "10", "target_amount": "500"},
        ],
        "transactions": [
            {"type": "income", "amount": "200", "source": "Extra", "date": "2025-09-01T10:00:00"},
            {"type": "expense", "amount": "50.25", "category": "Lazer", "date": "2025-09-02T10:00:00"},
        ],
    })
    ledger = load_seed(path)

    assert ledger.user_name == "Ana"
    assert ledger.monthly_income == Decimal("3000")
    assert ledger.current_balance == Decimal("250.25")
    assert len(ledger.transactions) == 2
    assert ledger.transactions[0].source == "Extra"

    goal = ledger.get_goal("emergency")
    assert goal.name == "Fundo de Emergência"
    assert goal.icon is GoalIcon.EMERGENCY
    assert goal.target_amount == Decimal("500")


def test_load_bundled_seed():
    ledger = load_seed("data/seed.json")
    assert ledger.user_name
    assert len(ledger.goals) >= 1
    assert len(ledger.transactions) >= 5


def test_transactions_frame(tmp_path):
    ledger = load_seed(write_seed(tmp_path, {
        "user_name": "Ana",
        "monthly_income": 1000,
        "transactions": [
            {"type": "expense", "amount": "12.5", "category": "Lazer", "date": "2025-09-02T10:00:00"},
        ],
    }))
    df = transactions_frame(ledger.transactions)
    assert list(df.columns) == FRAME_COLUMNS
    assert df.loc[0, "signed_amount"] == -12.5
    assert df.loc[0, "date"].day == 2


def test_empty_frame_keeps_columns():
    df = transactions_frame(())
    assert df.empty
    assert list(df.columns) == FRAME_COLUMNS
