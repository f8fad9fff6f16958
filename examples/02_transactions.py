"""
Example 02: Transactions

This example demonstrates transaction management with automatic rollback on errors.
"""

from ifx_odbc import connect


def main():
    with connect(":memory:", driver="sqlite") as db:
        db.allrows("CREATE TABLE stock (item TEXT PRIMARY KEY, qty INTEGER NOT NULL)")
        db.allrows("INSERT INTO stock VALUES (:item, :qty)", {"item": "bolt", "qty": 10})

        print("=== Transactions ===\n")

        # Commit on clean exit
        with db.transaction() as tx:
            tx.execute(
                "UPDATE stock SET qty = qty - :n WHERE item = :item", {"n": 3, "item": "bolt"}
            )
        print(f"after commit: {db.fetch_scalar('SELECT qty FROM stock')}")

        # Rollback when the block raises
        try:
            with db.transaction() as tx:
                tx.execute("UPDATE stock SET qty = 0")
                raise RuntimeError("shipment cancelled")
        except RuntimeError as e:
            print(f"rolled back: {e}")
        print(f"after rollback: {db.fetch_scalar('SELECT qty FROM stock')}")


if __name__ == "__main__":
    main()
