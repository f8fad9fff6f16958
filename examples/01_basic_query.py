"""
Example 01: Basic Query Execution

This example demonstrates prepared statements, placeholder substitution and
the different ways of reading rows from a ResultSet.
"""

from ifx_odbc import Binding, ParamType, Signal, connect
import tempfile
from pathlib import Path


def main():
    # Create a temporary database
    db_file = tempfile.NamedTemporaryFile(delete=False, suffix=".db")
    db_path = db_file.name
    db_file.close()

    db = connect(f"DATABASE={db_path}", driver="sqlite")

    db.allrows("""
        CREATE TABLE customer (
            customer_num INTEGER PRIMARY KEY,
            fname TEXT NOT NULL,
            lname TEXT NOT NULL,
            zipcode TEXT
        )
    """)
    insert = db.prepare("INSERT INTO customer (fname, lname, zipcode) VALUES (?, ?, ?)")
    insert.set_bind_types(["string", "string", "string"])
    insert.execute(["Ludwig", "Pauli", "94086"])
    insert.execute(["Carole", "Sadler", "94117"])
    insert.execute(["Philip", "O'Currie", "02135"])
    insert.close()

    print("=== Basic Query Execution ===\n")

    # Positional placeholders: values are escaped and substituted in order
    rows = db.allrows("SELECT fname, lname FROM customer WHERE lname = ?", ["O'Currie"])
    print(f"allrows result: {rows}\n")

    # Named placeholders with explicit type hints
    stmt = db.prepare("SELECT * FROM customer WHERE customer_num < :max LIMIT :n")
    stmt.paramtype("n", ParamType.NUMERIC)
    stmt.paramtype("max", ParamType.NUMERIC)
    rs = stmt.execute({"n": 2, "max": 10})
    print(f"columns: {rs.columns()}")
    for row in rs:
        print(f"  - {row}")
    print()

    # nextrow with a Binding
    rs = stmt.execute({"n": 3, "max": 10})
    row = Binding()
    while rs.nextrow(row):
        print(f"nextrow: {row.value['fname']} {row.value['lname']}")
    print()

    # foreach with early stop
    def show(row):
        print(f"foreach: {row['fname']}")
        return Signal.STOP

    db.foreach("SELECT fname FROM customer ORDER BY fname", show)

    # fetch_scalar: Get a single value
    count = db.fetch_scalar("SELECT COUNT(*) FROM customer")
    print(f"\nfetch_scalar result: {count} customers")

    # Closing the connection closes every statement and result set
    db.close()
    Path(db_path).unlink()


if __name__ == "__main__":
    main()
