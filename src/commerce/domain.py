"""Commerce bounded context: catalogue stock, carts, orders and payments.

A single domain so that checkout, cancellation and payment reconciliation
can touch products, carts, orders and payments inside one unit of work.
"""

from protean.domain import Domain

commerce = Domain(name="commerce")
