from fastapi.testclient import TestClient
from app.main import app

client = TestClient(app)
headers = {"X-User-ID": "demo-ayesha", "X-User-Role": "user", "X-User-Name": "Ayesha"}

print('ROOT:')
print(client.get('/').json())

print('\nHEALTH:')
print(client.get('/health').json())

print('\nDB HEALTH:')
try:
    resp = client.get('/health/db')
    print(resp.status_code)
    try:
        print(resp.json())
    except Exception:
        print(resp.text)
except Exception as e:
    print('DB call raised exception:', e)

print('\nDASHBOARD:')
resp = client.get('/dashboard', headers=headers)
print(resp.status_code, resp.json())

print('\nVOLUNTEER EVENTS:')
print(client.get('/volunteers/events').json())
