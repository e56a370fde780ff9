import os

from werkzeug.security import generate_password_hash

from entinvoicing import create_app, create_manager_user, db
from entinvoicing.models import User, UserRole


def seed_initial_data() -> None:
    """Seed the database with a manager and, optionally, a clerk account."""
    app = create_app([])
    with app.app_context():
        create_manager_user()
        clerk_username = os.getenv("CLERK_USERNAME")
        clerk_password = os.getenv("CLERK_PASS")
        if clerk_username and clerk_password:
            clerk = User.query.filter_by(username=clerk_username).first()
            if clerk is None:
                clerk = User(username=clerk_username, role=UserRole.CLERK)
                db.session.add(clerk)
            clerk.password = generate_password_hash(clerk_password)
            clerk.active = True
        db.session.commit()
        print("Initial manager and clerk accounts created.")


if __name__ == "__main__":
    seed_initial_data()
