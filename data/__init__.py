# data -- SQLAlchemy implementations of the domain repositories
