from datetime import date

from portfolio_dashboard import dashboard
from portfolio_dashboard.api_client import ApiError, Portfolio
from portfolio_dashboard.models import FinancialEvent, MortgageTerms


def _build_portfolio():
    return Portfolio(
        properties=[{'_id': 'p1', 'name': 'Calle Mayor 3'}, {'id': 'p2', 'name': 'Avenida Sol 8'}],
        incomes=[
            FinancialEvent(id='i1', property_id='p1', kind='income', type='rent', amount=900.0, date=date(2024, 1, 5)),
            FinancialEvent(id='i2', property_id='p2', kind='income', type='rent', amount=700.0, date=date(2024, 1, 7)),
        ],
        expenses=[
            FinancialEvent(id='x1', property_id='p2', kind='expense', type='taxes', amount=300.0, date=date(2024, 6, 30)),
        ],
        mortgages=[
            MortgageTerms(id='m1', property_id='p1', type='fixed', principal=100000.0, term_years=20,
                          start_date=date(2020, 1, 1), fixed_rate=3.0),
        ],
    )


class _FakeClient:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error

    def __call__(self, session, **kwargs):
        self.session = session
        return self

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return None

    def fetch_portfolio(self):
        if self.error is not None:
            raise self.error
        return self.result


def test_load_portfolio_from_backend_saves_snapshot(monkeypatch):
    portfolio = _build_portfolio()
    fake = _FakeClient(result=portfolio)
    saved = []
    monkeypatch.setattr(dashboard, 'PortfolioClient', fake)
    monkeypatch.setattr(dashboard, 'save_snapshot', saved.append)

    loaded, source = dashboard.load_portfolio('token-123')

    assert loaded is portfolio
    assert source == 'backend'
    assert saved == [portfolio]
    assert fake.session.token == 'token-123'


def test_load_portfolio_survives_unwritable_snapshot(monkeypatch):
    portfolio = _build_portfolio()

    def _read_only(portfolio):
        raise PermissionError("read-only data directory")

    monkeypatch.setattr(dashboard, 'PortfolioClient', _FakeClient(result=portfolio))
    monkeypatch.setattr(dashboard, 'save_snapshot', _read_only)

    loaded, source = dashboard.load_portfolio('token-123')

    assert loaded is portfolio
    assert source == 'backend'


def test_load_portfolio_falls_back_to_snapshot_on_api_error(monkeypatch):
    cached = _build_portfolio()
    monkeypatch.setattr(dashboard, 'PortfolioClient', _FakeClient(error=ApiError('boom', status_code=503)))
    saved = []
    monkeypatch.setattr(dashboard, 'save_snapshot', saved.append)
    monkeypatch.setattr(dashboard, 'load_snapshot', lambda: cached)

    loaded, source = dashboard.load_portfolio('token-123')

    assert loaded is cached
    assert source == 'snapshot'
    assert saved == []


def test_load_portfolio_without_token_reads_snapshot(monkeypatch):
    def _no_client(*args, **kwargs):
        raise AssertionError("backend must not be contacted without a token")

    monkeypatch.setattr(dashboard, 'PortfolioClient', _no_client)
    monkeypatch.setattr(dashboard, 'load_snapshot', lambda: Portfolio())

    loaded, source = dashboard.load_portfolio(None)

    assert loaded.is_empty
    assert source == 'snapshot'


def test_filter_by_property():
    portfolio = _build_portfolio()

    only_p2 = dashboard.filter_by_property(portfolio, 'p2')

    assert only_p2.property_names() == {'p2': 'Avenida Sol 8'}
    assert [e.id for e in only_p2.incomes] == ['i2']
    assert [e.id for e in only_p2.expenses] == ['x1']
    assert only_p2.mortgages == []
    assert dashboard.filter_by_property(portfolio, None) is portfolio
