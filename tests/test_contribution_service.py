import asyncio
import unittest

from core.exceptions import ConsistencyError, StoreError, ValidationError
from core.store import RecordStore
from schemas.contribution import ContributionCreate, ContributorInfo
from services.contribution_service import ContributionService
from store_fixtures import StoreTestCase


class FailingIncrementStore(RecordStore):
    async def increment(self, table, row_id, deltas, extra=None):
        raise StoreError("connection lost during update", code="08006")


class ContributionServiceTests(StoreTestCase):
    async def asyncSetUp(self):
        await super().asyncSetUp()
        self.service = ContributionService(self.store)
        self.project = await self.add_project(target_amount=1000)

    async def project_totals(self):
        project = await self.store.select_one("projects", {"id": self.project.id})
        return project.current_amount, project.contributors

    async def test_record_contribution_updates_totals(self):
        await self.service.record_contribution(self.project.id, 50, "mobile-money")
        await self.service.record_contribution(self.project.id, 25, "paypal")

        self.assertEqual(await self.project_totals(), (75, 2))

    async def test_guest_contact_details_are_kept(self):
        contribution = await self.service.record_contribution(
            self.project.id,
            30,
            "bank-transfer",
            ContributorInfo(contributor_name="Esi", contributor_email="esi@example.org"),
            transaction_reference="TX-1-1",
        )

        self.assertIsNone(contribution.user_id)
        self.assertEqual(contribution.contributor_name, "Esi")
        self.assertEqual(contribution.payment_status, "completed")
        self.assertEqual(contribution.transaction_reference, "TX-1-1")

    async def test_invalid_amount_is_rejected_before_writing(self):
        for amount in (0, -5):
            with self.assertRaises(ValidationError):
                await self.service.record_contribution(self.project.id, amount, "paypal")

        with self.assertRaises(ValidationError):
            await self.service.record_contribution(self.project.id, 10, "")

        self.assertEqual(await self.store.count("contributions"), 0)
        self.assertEqual(await self.project_totals(), (0, 0))

    async def test_concurrent_contributions_are_all_counted(self):
        await asyncio.gather(*[
            self.service.record_contribution(self.project.id, 10, "mobile-money")
            for _ in range(5)
        ])

        self.assertEqual(await self.project_totals(), (50, 5))
        self.assertEqual(await self.store.count("contributions", {"project_id": self.project.id}), 5)

    async def test_unknown_project_is_rejected(self):
        with self.assertRaises(ValidationError) as ctx:
            await self.service.record_contribution("missing", 10, "paypal")

        self.assertEqual(ctx.exception.code, "FOREIGN_KEY_VIOLATION")
        self.assertEqual(await self.store.count("contributions"), 0)

    async def test_failed_total_update_is_reported_and_reconcilable(self):
        service = ContributionService(FailingIncrementStore(self.store.session_factory))

        with self.assertRaises(ConsistencyError) as ctx:
            await service.record_contribution(self.project.id, 40, "paypal")

        error = ctx.exception
        self.assertEqual(error.project_id, self.project.id)
        self.assertEqual(error.amount, 40)
        self.assertEqual(error.to_dict()["contribution_id"], error.contribution_id)

        # The contribution row stays, the totals do not move
        self.assertEqual(await self.store.count("contributions"), 1)
        self.assertEqual(await self.project_totals(), (0, 0))

        project = await self.service.reconcile_project(self.project.id)
        self.assertEqual((project.current_amount, project.contributors), (40, 1))

    async def test_reconcile_project_without_contributions(self):
        await self.store.update("projects", self.project.id, {"current_amount": 99, "contributors": 3})

        project = await self.service.reconcile_project(self.project.id)

        self.assertEqual((project.current_amount, project.contributors), (0, 0))

    async def test_create_contribution_from_payload(self):
        await self.add_user("ama")
        payload = ContributionCreate(
            project_id=self.project.id,
            user_id="ama",
            amount=15,
            payment_method="paypal",
            payment_status="pending",
        )

        contribution = await self.service.create_contribution(payload)

        self.assertEqual(contribution.user_id, "ama")
        self.assertEqual(contribution.payment_status, "pending")
        self.assertEqual(await self.project_totals(), (15, 1))

    async def test_user_contributions_include_project(self):
        await self.add_user("ama")
        await self.service.record_contribution(self.project.id, 20, "paypal", ContributorInfo(user_id="ama"))

        contributions = await self.service.get_contributions_by_user("ama")

        self.assertEqual(len(contributions), 1)
        self.assertEqual(contributions[0].project.title, self.project.title)
        self.assertEqual(await self.service.get_contributions_by_user("kofi"), [])

    async def test_update_payment_status(self):
        contribution = await self.service.record_contribution(self.project.id, 20, "paypal")

        updated = await self.service.update_payment_status(contribution.id, "failed")

        self.assertEqual(updated.payment_status, "failed")
        self.assertEqual(updated.amount, 20)


if __name__ == "__main__":
    unittest.main()
