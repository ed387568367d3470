import os

from app import create_app
from app.database import init_db

app = create_app()

# Initialize storage (tables/files, admin user, optional seed)
init_db(app)

if __name__ == '__main__':
    debug = os.environ.get('FLASK_DEBUG', '1').lower() in ('1', 'true', 'yes')
    app.run(debug=debug, port=int(os.environ.get('PORT', 5000)))
