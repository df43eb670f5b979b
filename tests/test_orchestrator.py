import pytest

from expense_ledger.errors import FormatError, ValidationError
from expense_ledger.orchestrator import (
    CONFIRM_CLEAR,
    CONFIRM_DELETE,
    CONFIRM_IMPORT,
    INVALID_EDIT_AMOUNT,
    AutoConfirm,
    LedgerController,
    create_app_components,
    format_amount,
)
from expense_ledger.services.storage import InMemoryStorage

from conftest import FIXED_NOW, SequentialIds


class ScriptedInteraction:
    """Answers dialogs from a script and remembers what was asked."""

    def __init__(self, confirm=True, answers=None):
        self._confirm = confirm
        self._answers = list(answers or [])
        self.questions = []
        self.prompts = []

    def confirm(self, question):
        self.questions.append(question)
        return self._confirm

    def prompt_field(self, label, default):
        self.prompts.append((label, default))
        return self._answers.pop(0)


@pytest.fixture
def controller_for(store):
    def _build(interaction):
        return LedgerController(store, interaction)
    return _build


class TestConfirmedActions:
    """Destructive actions ask first."""

    def test_delete_confirmed(self, store, controller_for):
        """Test that a confirmed delete removes the record."""
        interaction = ScriptedInteraction(confirm=True)
        controller = controller_for(interaction)
        record = controller.add_expense(amount=5)

        assert controller.delete_expense(record.id) is True
        assert len(store) == 0
        assert interaction.questions == [CONFIRM_DELETE]

    def test_delete_declined(self, store, controller_for):
        """Test that declining keeps the record."""
        controller = controller_for(ScriptedInteraction(confirm=False))
        record = controller.add_expense(amount=5)

        assert controller.delete_expense(record.id) is False
        assert record.id in store

    def test_clear_confirmed_and_declined(self, store, controller_for):
        """Test both answers to the clear prompt."""
        store.add(amount=1)

        declined = ScriptedInteraction(confirm=False)
        assert controller_for(declined).clear_all() is False
        assert len(store) == 1
        assert declined.questions == [CONFIRM_CLEAR]

        assert controller_for(ScriptedInteraction(confirm=True)).clear_all() is True
        assert len(store) == 0

    def test_import_declined_changes_nothing(self, store, controller_for):
        """Test that a declined import never parses the file."""
        store.add(amount=1)
        interaction = ScriptedInteraction(confirm=False)

        assert controller_for(interaction).import_file("not even json") is None
        assert len(store) == 1
        assert interaction.questions == [CONFIRM_IMPORT]

    def test_import_confirmed(self, store, controller_for):
        """Test that a confirmed import replaces the ledger."""
        store.add(amount=1)
        report = controller_for(ScriptedInteraction()).import_file(
            '[{"id": "x", "amount": 3, "category": "Food"}]'
        )
        assert report.accepted == 1
        assert [r.id for r in store.records] == ["x"]

    def test_import_bad_file_raises(self, controller_for):
        """Test that an unusable file surfaces as FormatError."""
        with pytest.raises(FormatError):
            controller_for(ScriptedInteraction()).import_file('{"a": 1}')

    def test_export(self, store, controller_for):
        """Test that export goes straight through."""
        store.add(amount=1)
        payload = controller_for(AutoConfirm()).export_file()
        assert payload.filename == "expenses.json"


class TestEditFlow:
    """Tests for prompt-driven editing."""

    def test_prompts_in_order_with_current_values(self, store, controller_for):
        """Test that each prompt is pre-filled with the current value."""
        record = store.add(amount=10, category="Food", date="2024-03-01", description="Lunch")
        interaction = ScriptedInteraction(answers=["2024-03-01", "Food", "10", "Lunch"])

        controller_for(interaction).edit_expense(record.id)

        assert interaction.prompts == [
            ("Edit date (YYYY-MM-DD):", "2024-03-01"),
            ("Edit category:", "Food"),
            ("Edit amount:", "10.0"),
            ("Edit description:", "Lunch"),
        ]

    def test_edit_applies_answers(self, store, controller_for):
        """Test a successful edit."""
        record = store.add(amount=10, category="Food", date="2024-03-01")
        interaction = ScriptedInteraction(answers=["2024-03-02", "", "42.5", "Dinner"])

        updated = controller_for(interaction).edit_expense(record.id)

        assert updated.id == record.id
        assert updated.date == "2024-03-02"
        assert updated.category == "Food"
        assert updated.amount == 42.5
        assert updated.description == "Dinner"

    def test_cancelled_prompt_aborts(self, store, controller_for):
        """Test that cancelling any prompt leaves the record alone."""
        record = store.add(amount=10)
        interaction = ScriptedInteraction(answers=["2024-03-02", None])

        assert controller_for(interaction).edit_expense(record.id) is None
        assert store.get(record.id) == record
        assert len(interaction.prompts) == 2

    @pytest.mark.parametrize("amount", ["abc", "0", "-4", ""])
    def test_invalid_amount_cancels_edit(self, store, controller_for, amount):
        """Test that a bad amount aborts the whole edit."""
        record = store.add(amount=10, description="Keep me")
        interaction = ScriptedInteraction(answers=["2024-03-02", "Health", amount, "Changed"])

        with pytest.raises(ValidationError, match=INVALID_EDIT_AMOUNT):
            controller_for(interaction).edit_expense(record.id)
        assert store.get(record.id) == record

    def test_edit_missing_record_is_noop(self, store, controller_for):
        """Test that editing a vanished record does nothing and asks nothing."""
        interaction = ScriptedInteraction()
        store.add(amount=1)
        before = store.records

        assert controller_for(interaction).edit_expense("ghost") is None
        assert interaction.prompts == []
        assert store.records == before

    @pytest.mark.parametrize("answer", ["yesterday", "15/01/2024", "2024-02-30"])
    def test_invalid_date_rejects_edit(self, store, controller_for, answer):
        """Test that a typed date must be a real YYYY-MM-DD day."""
        record = store.add(amount=10, date="2024-03-01")
        interaction = ScriptedInteraction(answers=[answer, "Food", "10", ""])

        with pytest.raises(ValidationError, match="YYYY-MM-DD"):
            controller_for(interaction).edit_expense(record.id)
        assert store.get(record.id) == record

    def test_untouched_stored_datetime_is_kept(self, store, controller_for):
        """Test that accepting an imported date with a time keeps it verbatim."""
        store.import_json('[{"id": "x", "date": "2024-01-15T10:30:00", "amount": 5}]')
        interaction = ScriptedInteraction(answers=["2024-01-15T10:30:00", "Food", "6", ""])

        updated = controller_for(interaction).edit_expense("x")

        assert updated.date == "2024-01-15T10:30:00"
        assert updated.amount == 6.0


class TestView:
    """Tests for building the display view."""

    def test_empty_view(self, controller_for):
        """Test the summary cards of an empty ledger."""
        view = controller_for(AutoConfirm()).view()
        assert view.records == []
        assert [(c.label, c.value) for c in view.cards] == [
            ("Filtered total", "0.00"),
            ("This month", "0.00"),
            ("Top category", "—"),
            ("Entries", "0"),
        ]

    def test_view_filters_and_summarizes(self, store, controller_for):
        """Test that filtered rows and whole-ledger stats come out together."""
        store.add(amount=1234.5, category="Food", date="2024-03-02")
        store.add(amount=20, category="Transport", date="2024-03-03")
        store.add(amount=5, category="Food", date="2024-02-10")

        view = controller_for(AutoConfirm()).view({"category": "Transport"})

        assert [r.category for r in view.records] == ["Transport"]
        cards = {c.label: c.value for c in view.cards}
        assert cards["Filtered total"] == "20.00"
        assert cards["This month"] == "1,254.50"
        assert cards["Top category"] == "Food: 1,239.50"
        assert cards["Entries"] == "3"
        assert "Transport" in view.categories

    def test_view_accepts_from_and_to_keys(self, store, controller_for):
        """Test the boundary filter shape with from/to keys."""
        store.add(amount=1, date="2024-01-14")
        store.add(amount=2, date="2024-01-15")
        store.add(amount=3, date="2024-01-16")

        view = controller_for(AutoConfirm()).view({
            "text": "", "category": "", "from": "2024-01-15", "to": "2024-01-15",
        })

        assert [r.date for r in view.records] == ["2024-01-15"]
        assert view.summary.filtered_total == 2

    def test_format_amount(self):
        """Test money formatting."""
        assert format_amount(0) == "0.00"
        assert format_amount(1234567.891) == "1,234,567.89"


class TestCreateAppComponents:
    """Tests for the component factory."""

    def test_injected_storage_is_loaded(self):
        """Test that the factory loads whatever is already stored."""
        storage = InMemoryStorage({
            "expense_tracker_items_v1":
                '[{"id": "a", "date": "2024-03-01", "category": "Pets", "amount": 2}]'
        })
        controller = create_app_components(
            storage=storage,
            clock=lambda: FIXED_NOW,
            id_factory=SequentialIds(),
        )
        assert [r.id for r in controller.store.records] == ["a"]
        assert "Pets" in controller.store.registry
        assert "Food" in controller.store.registry

    def test_memory_backend_from_env(self, monkeypatch, tmp_path):
        """Test backend selection through the environment."""
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("LEDGER_STORAGE_BACKEND", "memory")
        controller = create_app_components(id_factory=SequentialIds())
        controller.add_expense(amount=3)
        assert len(controller.store) == 1
        assert list(tmp_path.iterdir()) == []

    def test_file_backend_survives_restart(self, monkeypatch, tmp_path):
        """Test that two app instances over one directory share data."""
        monkeypatch.setenv("LEDGER_STORAGE_BACKEND", "file")
        monkeypatch.setenv("LEDGER_STORAGE_DATA_DIR", str(tmp_path))

        first = create_app_components(id_factory=SequentialIds())
        first.add_expense(amount=3, category="Food")

        second = create_app_components()
        assert [r.id for r in second.store.records] == ["exp-1"]

    def test_custom_fallback_category(self, monkeypatch):
        """Test that app settings reach the store."""
        monkeypatch.setenv("LEDGER_STORAGE_BACKEND", "memory")
        monkeypatch.setenv("LEDGER_FALLBACK_CATEGORY", "Misc")
        controller = create_app_components()
        assert controller.add_expense(amount=1).category == "Misc"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
