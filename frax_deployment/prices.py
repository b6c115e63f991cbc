from decimal import Decimal
from typing import List, NamedTuple

from frax_deployment.constants import PRICE_PRECISION
from frax_deployment.ledger import Ledger
from frax_deployment.resolver import ResolvedComponents
from frax_deployment.topology import FRAX, oracle_component, token_component


class PriceQuote(NamedTuple):
    label: str
    price: Decimal
    unit: str

    def __str__(self) -> str:
        return f"{self.label}: {self.price} {self.unit}"


class OracleQuery(NamedTuple):
    """A 'consult' call on one of the pair oracles."""

    symbol_a: str
    symbol_b: str
    token: str  # symbol of the token being priced in
    amount_in: int = PRICE_PRECISION
    precision: int = PRICE_PRECISION

    @property
    def oracle(self) -> str:
        return oracle_component(self.symbol_a, self.symbol_b)

    @property
    def label(self) -> str:
        prefix = self.symbol_a.lower() if self.symbol_a in ("FRAX", "FXS") else self.symbol_a
        return f"{prefix}_price_from_{self.symbol_a}_{self.symbol_b}"

    @property
    def unit(self) -> str:
        quoted = self.symbol_b if self.token == self.symbol_b else self.symbol_a
        priced = self.symbol_a if quoted == self.symbol_b else self.symbol_b
        return f"{priced} = 1 {quoted}"


ORACLE_QUERIES = [
    OracleQuery("FRAX", "WETH", token="WETH"),
    OracleQuery("FRAX", "USDC", token="USDC"),
    OracleQuery("FRAX", "6DEC", token="6DEC"),
    OracleQuery("FRAX", "FXS", token="FXS"),
    OracleQuery("FXS", "WETH", token="WETH"),
    OracleQuery("USDC", "WETH", token="WETH"),
    # reported unscaled
    OracleQuery("6DEC", "WETH", token="WETH", amount_in=10**12, precision=1),
]

PRICE_COMPONENTS = [FRAX] + sorted(
    {q.oracle for q in ORACLE_QUERIES} | {token_component(q.token) for q in ORACLE_QUERIES}
)


def _scaled(value: int, precision: int = PRICE_PRECISION) -> Decimal:
    return Decimal(value) / Decimal(precision)


def stable_token_prices(ledger: Ledger, components: ResolvedComponents) -> List[PriceQuote]:
    """Current FRAX and FXS prices as reported by the stable token."""
    frax = components[FRAX]
    return [
        PriceQuote(
            label="frax_price",
            price=_scaled(ledger.read(frax.contract_type, frax.address, "frax_price")),
            unit="USD = 1 FRAX",
        ),
        PriceQuote(
            label="fxs_price",
            price=_scaled(ledger.read(frax.contract_type, frax.address, "fxs_price")),
            unit="USD = 1 FXS",
        ),
    ]


def oracle_prices(
    ledger: Ledger, components: ResolvedComponents, queries: List[OracleQuery] = None
) -> List[PriceQuote]:
    """Consults each pair oracle for the price of one token in terms of the other."""
    quotes = list()
    for query in ORACLE_QUERIES if queries is None else queries:
        oracle = components[query.oracle]
        token = components[token_component(query.token)]
        amount_out = ledger.read(
            oracle.contract_type, oracle.address, "consult", token.address, query.amount_in
        )
        quotes.append(
            PriceQuote(
                label=query.label, price=_scaled(amount_out, query.precision), unit=query.unit
            )
        )
    return quotes


def collect_prices(ledger: Ledger, components: ResolvedComponents) -> List[PriceQuote]:
    return stable_token_prices(ledger, components) + oracle_prices(ledger, components)
