#!/usr/bin/env python3
# Example usage of embedded_json_db

from embedded_json_db import Database

# Members: name is required, age defaults to 18 and may be null
MEMBERS = [
    {"name": "name", "type": "string"},
    {"name": "age", "type": "number", "null": True, "default": 18},
    {"name": "active", "type": "boolean", "default": True},
]

def main() -> None:
    # Create/open the database file; missing files start as {"tables": []}
    db = Database("demo.json")

    if not db.table_exists("members"):
        db.create_table("members", MEMBERS).unwrap()

    # Insert returns the new _id
    res = db.insert("members", {"name": "Alice", "age": 33})
    print("Inserted:", res.value)
    db.insert("members", {"name": "Bob"})

    # Failures come back in the result instead of raising
    bad = db.insert("members", {"age": "old"})
    print("Rejected:", bad.message)

    for r in db.select("members", lambda r: r["age"] >= 18).unwrap():
        print("Adult:", r["name"], r["age"])

    # Update a set of records
    n = db.update("members", {"age": 34}, lambda r: r["name"] == "Alice").unwrap()
    print("Updated records:", n)

    db.each("members", visit=lambda r: print("Member", r.id, r["name"]))

    print("Deleted:", db.delete("members", lambda r: not r["active"]).unwrap())
    print("Count:", db.count("members").unwrap())

if __name__ == "__main__":
    main()
