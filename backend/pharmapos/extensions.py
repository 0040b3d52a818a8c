# Overview: Shared Flask extension instances; bound to an app in create_app().

from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate

# All services run on db.session, one scoped session per app context
db = SQLAlchemy()
migrate = Migrate()
