import os

# до импорта app.*: Settings читаются один раз при импорте
os.environ.setdefault("USE_REDIS", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("SUPER_ADMIN_ID", "super-admin")
