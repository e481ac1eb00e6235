# circle/events/__init__.py
# 조립된 인스턴스는 EventsConfig.ready() 에서 만들어지고 app config 에 붙어 있다.


def _config():
    from django.apps import apps

    return apps.get_app_config("events")


def get_bus():
    return _config().bus


def get_sink():
    return _config().sink


def get_dispatcher():
    return _config().dispatcher
