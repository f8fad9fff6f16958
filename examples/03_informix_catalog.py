"""
Example 03: Informix over ODBC

This example connects to an Informix data source defined in odbc.ini and
browses its system catalog. Requires pyodbc and the Informix CLI driver.
"""

import sys

from ifx_odbc import ExecutionError, connect, datasources


def main():
    print(f"Data sources: {datasources()}")
    dsn = sys.argv[1] if len(sys.argv) > 1 else "stores"

    with connect(f"DSN={dsn}") as db:
        print(f"Connected: {db.info()}\n")

        for table in db.tables("cust*"):
            print(f"{table}:")
            for name, column in db.columns(table).items():
                print(f"  {name} type={column.type} length={column.precision}")
            print(f"  primary key: {db.primarykeys(table)}")

        stmt = db.prepare("SELECT FIRST :n tabname FROM systables WHERE tabid < :max")
        stmt.paramtype("n", "numeric")
        stmt.paramtype("max", "numeric")
        print(stmt.allrows({"n": 3, "max": 10}, as_="lists"))

        try:
            db.allrows("SELECT * FROM no_such_table")
        except ExecutionError as e:
            print(f"\n{e}")


if __name__ == "__main__":
    main()
