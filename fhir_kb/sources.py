"""Reference pages fetched for each topic at index time."""

from __future__ import annotations

from typing import Tuple

from .schemas import SourceRef

_BASE = "https://build.fhir.org/ig/HL7"


def _pages(topic: str, guide: str, *pages: str) -> Tuple[SourceRef, ...]:
    return tuple(SourceRef(url=f"{_BASE}/{guide}/{page}", topic=topic) for page in pages)


# Topics covered by expert knowledge only (provider-access, eligibility, claim) have no pages here
IG_SOURCES: Tuple[SourceRef, ...] = (
    # Da Vinci
    *_pages("pdex", "davinci-epdx", "index.html", "payertopayerexchange.html", "provider-access-api.html"),
    *_pages("pas", "davinci-pas", "index.html", "usecases.html", "specification.html"),
    *_pages("cdex", "davinci-ecdx", "index.html", "direct-query.html", "task-based-approach.html", "attachments.html"),
    *_pages("crd", "davinci-crd", "index.html", "hooks.html"),
    *_pages("dtr", "davinci-dtr", "index.html", "specification.html"),
    *_pages("atr", "davinci-atr", "index.html", "usecases.html"),
    *_pages("hrex", "davinci-hrex", "index.html"),
    *_pages("deqm", "davinci-deqm", "index.html", "datax.html"),
    *_pages("alerts", "davinci-alerts", "index.html"),
    *_pages("ra", "davinci-ra", "index.html"),
    *_pages("pct", "davinci-pct", "index.html", "gfe_coordination.html"),
    # CARIN
    *_pages("carin", "carin-bb", "index.html", "Background.html", "Use_Case.html"),
    *_pages("carin-dic", "carin-digital-insurance-card", "index.html"),
    # Foundational
    *_pages("uscore", "US-Core", "index.html", "general-guidance.html", "clinical-notes.html"),
    *_pages(
        "smart",
        "smart-app-launch",
        "index.html",
        "app-launch.html",
        "backend-services.html",
        "scopes-and-launch-context.html",
    ),
    *_pages("bulk", "bulk-data", "index.html", "export.html"),
    *_pages("subscriptions", "fhir-subscription-backport-ig", "index.html", "channels.html", "payloads.html"),
    # Pharmacy and directories
    *_pages("formulary", "davinci-drug-formulary", "index.html"),
    *_pages("plannet", "davinci-pdex-plan-net", "index.html"),
    *_pages("specialty-rx", "fhir-specialty-rx", "index.html"),
    # Quality measures
    *_pages("qicore", "fhir-qi-core", "index.html"),
    *_pages("cqfm", "cqf-measures", "index.html"),
    # Clinical exchange
    *_pages("c-cda", "ccda-on-fhir", "index.html"),
    *_pages("ips", "fhir-ips", "index.html"),
    # Referral and orders
    *_pages("bser", "bser", "index.html"),
    *_pages("eltss", "eLTSS", "index.html"),
    # Public health
    *_pages("ecr", "case-reporting", "index.html"),
    *_pages("medmorph", "fhir-medmorph", "index.html"),
)
