# promote_admin.py
#
# Operator tool: grant the admin role to an existing account, bypassing the
# row-level policies. Use it to bootstrap the first administrator; after
# that, admins promote others through POST /api/v1/users/promote.
#
#   python promote_admin.py someone@hospital.com

import sys

from sqlmodel import Session

from app.database import engine
from app.models.enums import Role
from app.repositories.profile_repo import ProfileRepository


def main():
    if len(sys.argv) != 2:
        print("Usage: python promote_admin.py <email>")
        sys.exit(2)

    email = sys.argv[1].strip()
    with Session(engine) as session:
        changed = ProfileRepository().elevated_set_role_by_email(session, email, Role.ADMIN)

    if not changed:
        print(f"No profile found for {email}. Has the user signed up?")
        sys.exit(1)

    print(f"{email} is now an admin.")


if __name__ == "__main__":
    main()
