def _confirm_transaction() -> bool:
    """Asks the operator to confirm signing of a single transaction."""
    answer = input("Continue Y/N? ")
    if answer.lower().strip() == "n":
        print("Aborting transaction!")
        return False
    return True
