#!/usr/bin/env python3
"""
Vault and Protection Example

Demonstrates storing, searching and protecting data with Kastela.
Reads connection settings from KASTELA_* environment variables.
"""

from kastela import Client, KastelaError


def main():
    client = Client.from_settings()

    print("Kastela Vault and Protection Example")
    print("=" * 50)

    # Example 1: Store values in a vault
    print("\n1. Storing vault data...")
    tokens = client.vault_store({
        "vaultID": "users",
        "values": [
            {"name": "jhon doe", "secret": "12345678"},
            {"name": "jane doe", "secret": "12345678"},
        ],
    })
    print(f"   Tokens: {tokens}")

    # Example 2: Search with pagination
    print("\n2. Searching vault data...")
    page = client.vault_fetch({"vaultID": "users", "search": "jhon doe", "size": 10})
    print(f"   Matches: {page}")

    # Example 3: Read back and update
    print("\n3. Reading and updating...")
    values = client.vault_get({"vaultID": "users", "tokens": tokens})
    print(f"   Values: {values}")
    client.vault_update({
        "vaultID": "users",
        "values": [{"token": tokens[1], "value": {"name": "jane d'arc", "secret": "12345678"}}],
    })
    print("   Updated second row")

    # Example 4: Field-level protection
    print("\n4. Sealing and opening protected rows...")
    client.protection_seal({"protectionID": "user-email", "primaryKeys": [1, 2, 3, 4, 5]})
    emails = client.protection_open({"protectionID": "user-email", "tokens": ["1", "2"]})
    print(f"   Opened: {emails}")

    # Example 5: Secure credential window
    print("\n5. Secure protection window...")
    credential = client.secure_protection_init({
        "operation": "WRITE",
        "protectionIDs": ["user-email"],
        "ttl": 1,
    })
    client.secure_protection_commit(credential)
    print("   Committed")

    # Example 6: Cleanup
    print("\n6. Deleting vault data...")
    client.vault_delete({"vaultID": "users", "tokens": tokens})
    print("   Deleted")

    client.close()
    print("\n" + "=" * 50)
    print("All examples completed!")


if __name__ == "__main__":
    try:
        main()
    except KastelaError as e:
        print(f"Kastela error: {e}")
        raise SystemExit(1)
