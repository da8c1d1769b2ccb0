import os
from dotenv import load_dotenv

load_dotenv()

db_backend = os.getenv("DB_BACKEND", "sqlite")
sqlite_path = os.getenv("SQLITE_PATH", "data/mines.sqlite3")

user = os.getenv("DB_USER")
password = os.getenv("DB_PASSWORD")
host = os.getenv("DB_HOST")
port = os.getenv("DB_PORT")
db_name = os.getenv("DB_NAME")

entropy_url = os.getenv("ENTROPY_URL", "https://api.trongrid.io/wallet/getnowblock")
entropy_timeout = float(os.getenv("ENTROPY_TIMEOUT", "5"))
server_seed_suffix = os.getenv("SERVER_SEED_SUFFIX", "2")

history_limit = int(os.getenv("HISTORY_LIMIT", "200"))
max_grid_size = int(os.getenv("MAX_GRID_SIZE", "32"))
hide_seed_until_finished = os.getenv("HIDE_SEED_UNTIL_FINISHED", "false").lower() in ("1", "true", "yes")

log_level = os.getenv("LOG_LEVEL", "INFO").upper()
server_host = os.getenv("HOST", "0.0.0.0")
server_port = int(os.getenv("PORT", "3000"))

if __name__ == "__main__":
    print(db_backend, sqlite_path, user, host, port, db_name, entropy_url, entropy_timeout)
