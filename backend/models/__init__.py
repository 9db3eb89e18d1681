# Importing the package registers every table on database.Base.metadata
from models import users, log, product, supplier, stock, purchase, truss  # noqa: F401
