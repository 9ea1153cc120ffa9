from typing import List, Optional

from prediction_provisioner.models import (DeploymentResult, OwnershipStatus, ProvisionBatch, RunReport,
                                           VerificationReport)


class ResultReporter:
    """Folds stage outputs into a RunReport and renders it for the operator.

    Success depends only on deployment and ownership. Failed events, unread
    counts and failed verification queries are reported as warnings.
    """

    def build(self, profile: str, deployment: DeploymentResult, ownership: OwnershipStatus,
              batch: Optional[ProvisionBatch] = None,
              verification: Optional[VerificationReport] = None) -> RunReport:
        warnings: List[str] = []
        if batch is not None:
            for outcome in batch.failed:
                warnings.append(outcome.error_message or f"Event {outcome.index} failed")
            if batch.count_error:
                warnings.append(f"Could not read event count: {batch.count_error}")
        if verification is not None:
            warnings.extend(verification.errors)

        success = bool(deployment.address) and ownership in (OwnershipStatus.PASSED,
                                                             OwnershipStatus.NOT_REQUIRED)
        return RunReport(
            profile=profile,
            deployment=deployment,
            ownership=ownership,
            batch=batch,
            verification=verification,
            warnings=tuple(warnings),
            success=success,
        )

    def render(self, report: RunReport) -> str:
        d = report.deployment
        lines = [
            "",
            "=" * 60,
            f"Run report ({report.profile})",
            "=" * 60,
            f"Contract:  {d.contract_name} {'deployed' if d.deployed else 'attached'} at {d.address}",
            f"Owner:     {d.owner_address} (check: {report.ownership.value})",
            f"Events before run: {d.initial_record_count}",
        ]
        batch = report.batch
        if batch is None:
            lines.append("Provisioning: not part of this profile")
        elif batch.skipped:
            lines.append(f"Provisioning ({batch.mode.value}): skipped, "
                         f"{batch.initial_record_count if batch.initial_record_count is not None else '?'} "
                         "events already present")
        else:
            lines.append(f"Provisioning ({batch.mode.value}): {len(batch.succeeded)} succeeded, "
                         f"{len(batch.failed)} failed")
            for o in batch.outcomes:
                detail = o.transaction_id or "-"
                if not o.succeeded:
                    detail = o.error_message or "failed"
                lines.append(f"  [{o.index}] {o.status.value:<9} {o.spec.title} ({detail})")
            final = batch.final_record_count
            lines.append(f"Events after run: {final if final is not None else 'unknown'}")

        v = report.verification
        if v is not None:
            lines.append(f"Verification of event {v.record_id}: "
                         f"round_active={v.round_is_active} remaining={v.time_remaining_seconds}s "
                         f"predictions={v.total_predictions} finalized={v.is_finalized}")
        for w in report.warnings:
            lines.append(f"⚠️ {w}")
        lines.append("🎉 Deployment completed successfully!" if report.success else "❌ Deployment failed")
        if report.success and d.deployed:
            lines.append("")
            lines.append("📋 Next Steps: update CONTRACT_ADDRESS_RAW in index.html:")
            lines.append(f'   const CONTRACT_ADDRESS_RAW = "{d.address}";')
        return "\n".join(lines)

    def emit(self, report: RunReport) -> int:
        print(self.render(report))
        return report.exit_code
