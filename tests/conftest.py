import textwrap

import pytest


def dedent(source: str) -> str:
    return textwrap.dedent(source).strip('\n')


@pytest.fixture
def bank_account_source():
    return dedent("""
        classDiagram
        class BankAccount {
            +String owner
            +BigDecimal balance
            +deposit(amount)
            +withdrawal(amount) int
        }
        Animal <|-- Duck
    """)


@pytest.fixture
def order_er_source():
    return dedent("""
        ---
        title: Order example
        ---
        erDiagram
            CUSTOMER ||--o{ ORDER : places
            ORDER ||--|{ LINE-ITEM : contains
            CUSTOMER {
                string name PK "The customer name"
                string(99) email UK
            }
    """)
