# Overview: Process-wide extension instances (database, migrations, outbound mail).

from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate

from .services.mail_service import Mailer

db = SQLAlchemy()
migrate = Migrate()
mailer = Mailer()
