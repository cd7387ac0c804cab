from celery import Celery


def make_celery(app):
    celery = Celery(app.import_name)
    celery.conf.update(app.config["CELERY_CONFIG"])

    celery.conf.update(
        task_ignore_result=False,
        track_started=True,
        accept_content=['json'],
        result_expires=3600
    )

    class ContextTask(celery.Task):
        def __call__(self, *args, **kwargs):
            with app.app_context():
                return self.run(*args, **kwargs)

    celery.Task = ContextTask
    celery.set_default()

    from restaurant_pos import tasks  # noqa: F401  registers the beat tasks
    return celery
