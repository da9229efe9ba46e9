from enum import Enum


class AllocationOrder(str, Enum):
    """
    Order in which cart units of one category are consumed by combos.

    Units of the same category satisfy a combo requirement identically, so the
    order only decides which products end up inside a combo and which are
    priced individually.
    """

    INPUT = "INPUT"            # Cart lines in the order the customer added them
    PRICE_DESC = "PRICE_DESC"  # Most expensive units first, ties in cart order
