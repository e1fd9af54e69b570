class AccountDisabledError(Exception):
    """Raised when a deactivated account tries to authenticate."""

    def __init__(self, account):
        self.account = account
        super().__init__(f"Le compte {account.email} est désactivé.")
