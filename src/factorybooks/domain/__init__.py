"""Domain layer for factorybooks.

Services are resolved lazily so that ``factorybooks.database`` can import
``factorybooks.domain.entities`` without pulling in the services that
depend on it.
"""

_SERVICES = {
    "ChartOfAccountsService": "factorybooks.domain.chart_of_accounts",
    "JournalPostingEngine": "factorybooks.domain.posting",
    "ReportService": "factorybooks.domain.reports",
    "ReconciliationService": "factorybooks.domain.audit",
    "DepreciationScheduler": "factorybooks.domain.depreciation",
    "ChequeService": "factorybooks.domain.cheques",
    "ActivityLogService": "factorybooks.domain.activity",
}

__all__ = list(_SERVICES)


def __getattr__(name):
    if name in _SERVICES:
        import importlib

        return getattr(importlib.import_module(_SERVICES[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
