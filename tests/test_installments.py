from datetime import date

import pytest

from app.domain.compliance.installments import (
    agreement_status,
    due_dates,
    generate_installments,
    installment_display_status,
    terms_changed,
)
from app.domain.compliance.schemas import AgreementCreate, AgreementUpdate
from app.domain.compliance.service import ComplianceService
from app.models import AgreementStatus, TaxInstallment, TaxStatus, TenderAgreement
from app.shared.exceptions import ValidationError

TODAY = date(2024, 6, 15)


def _agreement(start, end, fee, frequency):
    return TenderAgreement(
        id=1,
        tender_name="Raipur Ring Road",
        tender_number="RMC/2024/17",
        district="Raipur",
        area="Ring Road",
        start_date=start,
        end_date=end,
        license_fee=fee,
        tax_frequency=frequency,
    )


def _create(db, number="RMC/2024/17", frequency="Quarterly", fee=12000, start=date(2024, 1, 1), end=date(2025, 1, 1)):
    service = ComplianceService(db, today=lambda: TODAY)
    return service, service.create_agreement(
        AgreementCreate(
            tenderName="Raipur Ring Road",
            tenderNumber=number,
            district="Raipur",
            startDate=start,
            endDate=end,
            taxFrequency=frequency,
            licenseFee=fee,
        )
    )


def test_monthly_schedule_for_one_year():
    rows = generate_installments(_agreement(date(2024, 1, 1), date(2025, 1, 1), 12000, "Monthly"))

    assert len(rows) == 12
    assert all(row.amount == 1000 for row in rows)
    assert [row.due_date for row in rows] == [date(2024, month, 1) for month in range(1, 13)]
    assert all(row.status == TaxStatus.PENDING for row in rows)


def test_quarterly_schedule_splits_fee_in_four():
    rows = generate_installments(_agreement(date(2024, 1, 1), date(2025, 1, 1), 50000, "Quarterly"))

    assert len(rows) == 4
    assert all(row.amount == 12500 for row in rows)
    assert [row.due_date for row in rows] == [date(2024, 1, 1), date(2024, 4, 1), date(2024, 7, 1), date(2024, 10, 1)]


def test_half_yearly_and_yearly():
    half = generate_installments(_agreement(date(2024, 4, 1), date(2026, 4, 1), 10000, "Half-Yearly"))
    yearly = generate_installments(_agreement(date(2024, 4, 1), date(2026, 4, 1), 10000, "Yearly"))

    assert [r.amount for r in half] == [5000] * 4
    assert [r.due_date for r in yearly] == [date(2024, 4, 1), date(2025, 4, 1)]
    assert [r.amount for r in yearly] == [10000, 10000]


def test_end_date_boundary_gets_no_installment():
    assert due_dates(date(2024, 1, 1), date(2024, 4, 1), "Quarterly") == [date(2024, 1, 1)]
    assert due_dates(date(2024, 1, 1), date(2024, 4, 2), "Quarterly") == [date(2024, 1, 1), date(2024, 4, 1)]


def test_month_end_start_does_not_drift():
    dates = due_dates(date(2024, 1, 31), date(2024, 5, 1), "Monthly")
    assert dates == [date(2024, 1, 31), date(2024, 2, 29), date(2024, 3, 31), date(2024, 4, 30)]


def test_amounts_are_rounded_to_paise():
    rows = generate_installments(_agreement(date(2024, 1, 1), date(2025, 1, 1), 10000, "Monthly"))
    assert rows[0].amount == 833.33


def test_one_time_agreement_is_scheduled_like_yearly():
    rows = generate_installments(_agreement(date(2024, 1, 1), date(2026, 1, 1), 12000, "One-Time"))

    assert [(r.due_date, r.amount) for r in rows] == [(date(2024, 1, 1), 12000), (date(2025, 1, 1), 12000)]


def test_installments_carry_agreement_details():
    row = generate_installments(_agreement(date(2024, 1, 1), date(2025, 1, 1), 12000, "Yearly"))[0]
    assert (row.agreement_id, row.tender_number, row.district, row.area) == (1, "RMC/2024/17", "Raipur", "Ring Road")


def test_unknown_frequency_is_rejected():
    with pytest.raises(ValueError):
        generate_installments(_agreement(date(2024, 1, 1), date(2025, 1, 1), 12000, "Weekly"))


def test_terms_changed_only_for_schedule_fields():
    agreement = _agreement(date(2024, 1, 1), date(2025, 1, 1), 12000, "Monthly")

    assert not terms_changed(agreement, {"tender_name": "Renamed", "area": "Telibandha"})
    assert not terms_changed(agreement, {"license_fee": 12000})
    assert terms_changed(agreement, {"license_fee": 15000})
    assert terms_changed(agreement, {"tax_frequency": "Quarterly"})
    assert terms_changed(agreement, {"end_date": date(2025, 6, 1)})


def test_overdue_is_derived_at_read_time():
    pending = TaxInstallment(due_date=date(2024, 6, 1), status=TaxStatus.PENDING)
    paid = TaxInstallment(due_date=date(2024, 6, 1), status=TaxStatus.PAID)
    future = TaxInstallment(due_date=date(2024, 7, 1), status=TaxStatus.PENDING)

    assert installment_display_status(pending, TODAY) == TaxStatus.OVERDUE
    assert installment_display_status(paid, TODAY) == TaxStatus.PAID
    assert installment_display_status(future, TODAY) == TaxStatus.PENDING
    assert pending.status == TaxStatus.PENDING


def test_agreement_status():
    assert agreement_status(date(2024, 6, 14), TODAY) == AgreementStatus.EXPIRED
    assert agreement_status(date(2024, 7, 1), TODAY) == AgreementStatus.EXPIRING_SOON
    assert agreement_status(date(2024, 12, 31), TODAY) == AgreementStatus.ACTIVE


def test_create_agreement_persists_schedule(db):
    _, agreement = _create(db)

    rows = db.query(TaxInstallment).filter(TaxInstallment.agreement_id == agreement.id).all()
    assert len(rows) == 4
    assert sum(r.amount for r in rows) == 12000


def test_terms_change_keeps_paid_and_replaces_pending(db):
    service, agreement = _create(db)
    first = min(agreement.installments, key=lambda r: r.due_date)
    service.pay_tax(first.id, "https://files.example/receipt.pdf")

    service.update_agreement(agreement.id, AgreementUpdate(taxFrequency="Monthly"))

    db.expire_all()
    rows = db.query(TaxInstallment).filter(TaxInstallment.agreement_id == agreement.id).all()
    paid = [r for r in rows if r.status == TaxStatus.PAID]
    pending = [r for r in rows if r.status == TaxStatus.PENDING]
    assert [(r.id, r.amount) for r in paid] == [(first.id, 3000)]
    assert len(pending) == 12
    assert all(r.amount == 1000 for r in pending)


def test_non_terms_edit_leaves_schedule_alone(db):
    service, agreement = _create(db)
    before = sorted(r.id for r in agreement.installments)

    service.update_agreement(agreement.id, AgreementUpdate(tenderName="Ring Road Phase II"))

    db.expire_all()
    after = sorted(r.id for r in db.query(TaxInstallment).filter(TaxInstallment.agreement_id == agreement.id))
    assert after == before


def test_duplicate_tender_number_is_rejected(db):
    _create(db)
    with pytest.raises(ValidationError):
        _create(db)


def test_soft_delete_hides_pending_taxes_only(db):
    service, agreement = _create(db)
    first = min(agreement.installments, key=lambda r: r.due_date)
    service.pay_tax(first.id)

    service.delete_agreement(agreement.id)

    db.expire_all()
    rows = db.query(TaxInstallment).filter(TaxInstallment.agreement_id == agreement.id).all()
    assert {(r.status, r.deleted) for r in rows} == {(TaxStatus.PAID, False), (TaxStatus.PENDING, True)}


def test_compliance_stats(db):
    service, agreement = _create(db)
    first = min(agreement.installments, key=lambda r: r.due_date)
    service.pay_tax(first.id)

    stats = service.get_stats()

    assert stats["totalActiveTenders"] == 1
    assert stats["expiringTenders"] == 0
    assert stats["pendingTaxes"] == 3
    # Apr 1 is past TODAY and unpaid
    assert stats["overdueTaxes"] == 1
    assert stats["totalTaxPaid"] == 3000
    assert stats["totalTaxLiability"] == 9000


def test_failed_regeneration_keeps_the_edit_and_paid_rows(db, monkeypatch, caplog):
    service, agreement = _create(db)
    first = sorted(agreement.installments, key=lambda t: t.due_date)[0]
    service.pay_tax(first.id)

    def broken(agreement):
        raise RuntimeError("schedule failed")

    monkeypatch.setattr("app.domain.compliance.service.generate_installments", broken)

    updated = service.update_agreement(agreement.id, AgreementUpdate(licenseFee=24000))

    db.expire_all()
    assert updated.license_fee == 24000
    remaining = db.query(TaxInstallment).filter(TaxInstallment.agreement_id == agreement.id).all()
    assert [(t.id, t.status) for t in remaining] == [(first.id, TaxStatus.PAID)]
    assert "regeneration failed" in caplog.text
