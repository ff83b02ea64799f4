import os
from dotenv import load_dotenv

load_dotenv()

db_backend = os.getenv("DB_BACKEND", "postgres")
user = os.getenv("DB_USER")
password = os.getenv("DB_PASSWORD")
host = os.getenv("DB_HOST")
port = os.getenv("DB_PORT")
db_name = os.getenv("DB_NAME")
db_pool_size = int(os.getenv("DB_POOL_SIZE", "20"))
sqlite_path = os.getenv("SQLITE_PATH")
pepper_data = os.getenv("PEPPER_DATA", "")
spin_proof_secret = os.getenv("SPIN_PROOF_SECRET")
require_spin_proof = os.getenv("REQUIRE_SPIN_PROOF", "false").lower() in ("1", "true", "yes")
redis_host = os.getenv("REDIS_HOST", "redis")
redis_port = int(os.getenv("REDIS_PORT", "6379"))

if __name__ == "__main__":
    print(db_backend, user, host, port, db_name, sqlite_path, redis_host, redis_port)
